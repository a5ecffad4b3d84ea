"""Database management commands."""

import typer
from rich.panel import Panel
from rich.prompt import Confirm

from src.storefront.core.services import DbManageService
from src.storefront.runtime.context import get_config
from src.storefront.runtime.init_db import init_db

from .utils import console, get_database_service

db_app = typer.Typer(help="Manage the storefront database")


@db_app.command("init")
def init() -> None:
    """Create all tables that do not exist yet."""
    init_db(get_database_service())
    console.print(
        Panel.fit(
            f"[green]✅ Tables created[/green]\n[dim]{get_config().database.url}[/dim]",
            title="Database",
        )
    )


@db_app.command("reset")
def reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Drop and recreate every table. All data is lost."""
    if not force and not Confirm.ask("Drop all storefront tables?"):
        console.print("[yellow]Reset cancelled[/yellow]")
        return

    manager = DbManageService(get_database_service().engine)
    manager.drop_all()
    manager.create_all()
    console.print("[green]✅ Database reset[/green]")
