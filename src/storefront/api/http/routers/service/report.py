"""Admin dashboard reports."""

from fastapi import APIRouter, Depends, Query

from src.storefront.api.http.deps import get_sales_report_service, require_admin
from src.storefront.core.services import SalesReportService
from src.storefront.core.services.report.sales_report import RevenueSummary, SalesReport

router = APIRouter(
    prefix="/admin/reports",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


@router.get("/sales", response_model=SalesReport)
def sales_report(
    limit: int | None = Query(default=None, ge=1),
    reports: SalesReportService = Depends(get_sales_report_service),
) -> SalesReport:
    """Revenue, top sellers and order status breakdown."""
    return reports.sales_report(limit)


@router.get("/revenue", response_model=RevenueSummary)
def revenue(
    reports: SalesReportService = Depends(get_sales_report_service),
) -> RevenueSummary:
    return reports.revenue_summary()
