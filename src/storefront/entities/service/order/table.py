"""Order database table models."""

from datetime import datetime

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from src.storefront.entities.core._base import EntityTable


class OrderTable(EntityTable, table=True):
    """Database persistence model for orders.

    Customer details are stored as a JSON document; they are a snapshot and
    never queried on their own.
    """

    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("user_id", "idempotency_key", name="uq_orders_user_idempotency"),
    )

    user_id: str = Field(foreign_key="users.id", index=True)
    customer: dict = Field(default_factory=dict, sa_column=Column(JSON))
    payment_method: str
    status: str = Field(index=True)
    subtotal: float
    shipping: float
    tax: float
    total: float
    idempotency_key: str | None = Field(default=None)
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None


class OrderItemTable(SQLModel, table=True):
    """Product snapshot lines belonging to an order."""

    __tablename__ = "order_items"

    id: int | None = Field(default=None, primary_key=True)
    order_id: str = Field(foreign_key="orders.id", index=True)
    product_id: str = Field(index=True)
    name: str
    price: float
    quantity: int
    image: str | None = None
    position: int = Field(default=0)
