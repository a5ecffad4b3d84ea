"""Entity package: Order."""

from .entity import (
    CustomerInfo,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
)
from .repository import OrderRepository
from .table import OrderItemTable, OrderTable

__all__ = [
    "CustomerInfo",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "OrderRepository",
    "OrderTable",
    "OrderItemTable",
]
