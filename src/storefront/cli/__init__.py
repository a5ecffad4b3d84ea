"""Main CLI application module."""

import typer

from .catalog_commands import catalog_app
from .db_commands import db_app
from .report_commands import report_app
from .user_commands import users_app

# Create the main CLI application
app = typer.Typer(
    help="🛒 Storefront CLI - database, catalog and reporting tasks",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(db_app, name="db")
app.add_typer(catalog_app, name="catalog")
app.add_typer(users_app, name="users")
app.add_typer(report_app, name="report")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
