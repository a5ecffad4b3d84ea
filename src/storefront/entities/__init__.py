"""Entities organized by business concept.

Each entity package contains:
- entity.py: Domain model with business logic
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .core.user import User, UserRepository, UserRole, UserTable
from .service.cart import Cart, CartItem, CartItemTable, CartRepository, CartTable
from .service.order import (
    CustomerInfo,
    Order,
    OrderItem,
    OrderItemTable,
    OrderRepository,
    OrderStatus,
    OrderTable,
    PaymentMethod,
)
from .service.product import Product, ProductRepository, ProductTable
from .service.review import Review, ReviewRepository, ReviewTable

__all__ = [
    "User",
    "UserRole",
    "UserTable",
    "UserRepository",
    "Product",
    "ProductTable",
    "ProductRepository",
    "Cart",
    "CartItem",
    "CartTable",
    "CartItemTable",
    "CartRepository",
    "CustomerInfo",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "OrderTable",
    "OrderItemTable",
    "OrderRepository",
    "Review",
    "ReviewTable",
    "ReviewRepository",
]
