"""Catalog seeding commands."""

import json
from pathlib import Path

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.table import Table

from src.storefront.core.services import ProductService
from src.storefront.core.services.catalog.product_service import ProductInput

from .utils import console, get_database_service

catalog_app = typer.Typer(help="Manage the product catalog")


def load_products(path: Path) -> list[ProductInput]:
    """Read products from ``{"products": [...]}`` or a bare JSON list."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("products", [])
    if not isinstance(data, list):
        raise ValueError("Expected a list of products")
    return [ProductInput.model_validate(item) for item in data]


@catalog_app.command("seed")
def seed(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with products"),
) -> None:
    """Load products from a JSON file."""
    try:
        products = load_products(file)
    except (ValueError, PydanticValidationError) as e:
        console.print(f"[red]❌ Invalid product file: {e}[/red]")
        raise typer.Exit(code=1) from None

    with get_database_service().session_scope() as session:
        service = ProductService(session)
        created = [service.create_product(product) for product in products]

    table = Table(title="Seeded products")
    table.add_column("Name", style="green")
    table.add_column("Category", style="cyan")
    table.add_column("Price", justify="right")
    table.add_column("Stock", justify="right")
    for product in created:
        table.add_row(product.name, product.category, f"{product.price:.2f}", str(product.stock))

    console.print(table)
    console.print(f"\n[green]Created {len(created)} products[/green]")
