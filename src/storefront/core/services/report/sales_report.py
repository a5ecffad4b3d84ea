"""Admin dashboard aggregates, computed from delivered orders."""

from collections import Counter

from pydantic import BaseModel
from sqlmodel import Session

from src.storefront.entities.service.order import Order, OrderRepository, OrderStatus
from src.storefront.runtime.context import get_config


class RevenueSummary(BaseModel):
    total: float
    orders: int
    monthly: dict[str, float]


class MonthlyRevenue(BaseModel):
    month: str
    amount: float


class TopProduct(BaseModel):
    product_id: str
    name: str
    sold: int
    revenue: float
    image: str | None = None


class SalesReport(BaseModel):
    summary: RevenueSummary
    monthly: list[MonthlyRevenue]
    top_products: list[TopProduct]
    total_items_sold: int
    average_order_value: float
    status_counts: dict[str, int]


def _month_key(order: Order) -> str:
    stamp = order.delivered_at or order.created_at
    return stamp.strftime("%Y-%m")


class SalesReportService:
    def __init__(self, db_session: Session):
        self._orders = OrderRepository(db_session)

    def _delivered(self) -> list[Order]:
        return self._orders.list_orders(statuses=[OrderStatus.DELIVERED])

    def revenue_summary(self) -> RevenueSummary:
        orders = self._delivered()
        monthly: dict[str, float] = {}
        for order in orders:
            key = _month_key(order)
            monthly[key] = round(monthly.get(key, 0.0) + order.total, 2)
        return RevenueSummary(
            total=round(sum(order.total for order in orders), 2),
            orders=len(orders),
            monthly=dict(sorted(monthly.items())),
        )

    def monthly_revenue(self) -> list[MonthlyRevenue]:
        monthly = self.revenue_summary().monthly
        return [MonthlyRevenue(month=month, amount=amount) for month, amount in sorted(monthly.items())]

    def top_selling_products(self, limit: int | None = None) -> list[TopProduct]:
        limit = limit if limit is not None else get_config().store.top_products_limit
        products: dict[str, TopProduct] = {}
        for order in self._delivered():
            for item in order.items:
                entry = products.get(item.product_id)
                if entry is None:
                    entry = products[item.product_id] = TopProduct(
                        product_id=item.product_id,
                        name=item.name,
                        sold=0,
                        revenue=0.0,
                        image=item.image,
                    )
                entry.sold += item.quantity
                entry.revenue = round(entry.revenue + item.line_total, 2)

        ranked = sorted(products.values(), key=lambda p: p.revenue, reverse=True)
        return ranked[:limit]

    def total_items_sold(self) -> int:
        return sum(order.item_count for order in self._delivered())

    def average_order_value(self) -> float:
        summary = self.revenue_summary()
        if not summary.orders:
            return 0.0
        return round(summary.total / summary.orders, 2)

    def order_status_counts(self) -> dict[str, int]:
        counts = Counter(str(order.status) for order in self._orders.list_orders())
        return {str(status): counts.get(str(status), 0) for status in OrderStatus}

    def sales_report(self, limit: int | None = None) -> SalesReport:
        summary = self.revenue_summary()
        return SalesReport(
            summary=summary,
            monthly=[
                MonthlyRevenue(month=month, amount=amount)
                for month, amount in summary.monthly.items()
            ],
            top_products=self.top_selling_products(limit),
            total_items_sold=self.total_items_sold(),
            average_order_value=(
                round(summary.total / summary.orders, 2) if summary.orders else 0.0
            ),
            status_counts=self.order_status_counts(),
        )
