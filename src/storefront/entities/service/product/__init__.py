"""Entity package: Product."""

from .entity import Product, slugify
from .repository import ProductRepository
from .table import ProductTable

__all__ = ["Product", "ProductRepository", "ProductTable", "slugify"]
