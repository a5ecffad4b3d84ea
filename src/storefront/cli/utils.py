"""Shared helpers for CLI commands."""

from rich.console import Console

from src.storefront.core.services import DbSessionService

console = Console()

_database_service: DbSessionService | None = None


def get_database_service() -> DbSessionService:
    """Lazily build the engine so ``--help`` never touches the database."""
    global _database_service
    if _database_service is None:
        _database_service = DbSessionService()
    return _database_service


def set_database_service(service: DbSessionService | None) -> None:
    global _database_service
    _database_service = service
