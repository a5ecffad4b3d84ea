"""Sales reporting commands."""

import typer
from rich.panel import Panel
from rich.table import Table

from src.storefront.core.services import SalesReportService
from src.storefront.runtime.context import get_config

from .utils import console, get_database_service

report_app = typer.Typer(help="Sales reports")


@report_app.command("sales")
def sales(
    limit: int | None = typer.Option(None, "--limit", "-l", help="Number of top products to show"),
) -> None:
    """Print revenue and the best-selling products."""
    currency = get_config().store.currency
    with get_database_service().session_scope() as session:
        report = SalesReportService(session).sales_report(limit)

    summary = report.summary
    console.print(
        Panel.fit(
            f"Revenue: [bold green]{summary.total:,.2f} {currency}[/bold green]\n"
            f"Delivered orders: {summary.orders}\n"
            f"Items sold: {report.total_items_sold}\n"
            f"Average order: {report.average_order_value:,.2f} {currency}",
            title="Sales",
        )
    )

    if report.monthly:
        months = Table(title="Monthly revenue")
        months.add_column("Month", style="cyan")
        months.add_column("Revenue", justify="right")
        for entry in report.monthly:
            months.add_row(entry.month, f"{entry.amount:,.2f}")
        console.print(months)

    if report.top_products:
        top = Table(title="Top products")
        top.add_column("Product", style="green")
        top.add_column("Sold", justify="right")
        top.add_column("Revenue", justify="right")
        for product in report.top_products:
            top.add_row(product.name, str(product.sold), f"{product.revenue:,.2f}")
        console.print(top)
    else:
        console.print("[yellow]No delivered orders yet[/yellow]")
