"""Entity: Order."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from src.storefront.entities.core._base import Entity


class PaymentMethod(StrEnum):
    COD = "cod"
    BANK = "bank"


class OrderStatus(StrEnum):
    PENDING = "pending"
    AWAITING_PAYMENT = "awaiting_payment"
    PROCESSING = "processing"
    IN_TRANSIT = "in_transit"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def initial_for(cls, method: PaymentMethod) -> "OrderStatus":
        return cls.PENDING if method == PaymentMethod.COD else cls.AWAITING_PAYMENT

    @property
    def is_open(self) -> bool:
        return self not in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.AWAITING_PAYMENT, OrderStatus.PROCESSING, OrderStatus.CANCELLED}
    ),
    OrderStatus.AWAITING_PAYMENT: frozenset(
        {OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.CANCELLED}
    ),
    OrderStatus.PROCESSING: frozenset(
        {OrderStatus.IN_TRANSIT, OrderStatus.SHIPPED, OrderStatus.CANCELLED}
    ),
    OrderStatus.IN_TRANSIT: frozenset(
        {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED}
    ),
    OrderStatus.SHIPPED: frozenset({OrderStatus.IN_TRANSIT, OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class CustomerInfo(BaseModel):
    """Shipping and contact details captured at checkout."""

    name: str
    email: str
    phone: str
    address: str
    city: str
    district: str


class OrderItem(BaseModel):
    """Snapshot of a product line at checkout time."""

    product_id: str
    name: str
    price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    image: str | None = None

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class Order(Entity):
    user_id: str
    customer: CustomerInfo
    items: list[OrderItem] = Field(default_factory=list)
    payment_method: PaymentMethod
    status: OrderStatus
    subtotal: float
    shipping: float
    tax: float
    total: float
    idempotency_key: str | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def can_transition_to(self, status: OrderStatus) -> bool:
        return status in ALLOWED_TRANSITIONS[self.status]
