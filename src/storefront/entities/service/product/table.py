"""Product database table model."""

from sqlalchemy import JSON, Column
from sqlmodel import Field

from src.storefront.entities.core._base import EntityTable


class ProductTable(EntityTable, table=True):
    """Database persistence model for products."""

    __tablename__ = "products"

    name: str = Field(index=True)
    description: str
    price: float
    sale_price: float | None = None
    category: str = Field(index=True)
    brand: str | None = None
    images: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    stock: int = Field(default=0)
    rating: float = Field(default=0)
    num_reviews: int = Field(default=0)
    features: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    specifications: dict[str, str] = Field(default_factory=dict, sa_column=Column(JSON))
    is_active: bool = Field(default=True)
    is_on_sale: bool = Field(default=False)
    is_new: bool = Field(default=False)
    slug: str = Field(index=True)
