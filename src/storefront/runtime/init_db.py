"""Database initialization script."""

from src.storefront.core.services.database.db_manage import DbManageService
from src.storefront.core.services.database.db_session import DbSessionService


def init_db(database_service: DbSessionService | None = None) -> None:
    """Create all database tables."""
    database_service = database_service or DbSessionService()
    DbManageService(database_service.engine).create_all()


if __name__ == "__main__":
    init_db()
