"""User management CLI commands."""

import typer

from src.storefront.core.errors import StorefrontError
from src.storefront.core.services import JwtGeneratorService, UserManagementService

from .utils import console, get_database_service

users_app = typer.Typer(help="Manage storefront users")


@users_app.command("create-admin")
def create_admin(
    email: str = typer.Argument(..., help="Email address of the administrator"),
    name: str = typer.Option("Administrator", "--name", "-n", help="Display name"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, help="Password"
    ),
) -> None:
    """Create an admin user, or promote an existing account."""
    try:
        with get_database_service().session_scope() as session:
            service = UserManagementService(JwtGeneratorService(), session)
            user, created = service.create_or_promote_admin(email, name, password)
    except StorefrontError as e:
        console.print(f"[red]❌ Failed to create admin: {e.message}[/red]")
        raise typer.Exit(code=1) from None

    if created:
        console.print(f"[green]✅ Created admin '{user.email}'[/green]")
    else:
        console.print(f"[green]✅ Promoted '{user.email}' to admin[/green]")
