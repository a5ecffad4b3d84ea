"""Entity package: Cart."""

from .entity import Cart, CartItem
from .repository import CartRepository
from .table import CartItemTable, CartTable

__all__ = ["Cart", "CartItem", "CartRepository", "CartTable", "CartItemTable"]
