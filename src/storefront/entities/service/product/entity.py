"""Entity: Product."""

import re
from typing import Any

from pydantic import Field, field_validator, model_validator

from src.storefront.entities.core._base import Entity

_WHITESPACE = re.compile(r"\s+")


def slugify(name: str) -> str:
    """Lower-case ``name`` and replace whitespace runs with ``-``."""
    return _WHITESPACE.sub("-", name.strip().lower())


class Product(Entity):
    """A catalog item that can be added to a cart and ordered."""

    name: str = Field(min_length=1, description="Product name")
    description: str = Field(min_length=1, description="Long description")
    price: float = Field(ge=0, description="Unit price")
    sale_price: float | None = Field(default=None, ge=0)
    category: str = Field(min_length=1)
    brand: str | None = Field(default=None)
    images: list[str] = Field(default_factory=list)
    stock: int = Field(default=0, ge=0)
    rating: float = Field(default=0, ge=0, le=5)
    num_reviews: int = Field(default=0, ge=0)
    features: list[str] = Field(default_factory=list)
    specifications: dict[str, str] = Field(default_factory=dict)
    is_active: bool = Field(default=True)
    is_on_sale: bool = Field(default=False)
    is_new: bool = Field(default=False)
    slug: str = Field(default="")

    @field_validator("name", "category", "brand", mode="before")
    @classmethod
    def _trim(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @model_validator(mode="after")
    def _derive_slug(self) -> "Product":
        if not self.slug:
            self.slug = slugify(self.name)
        return self

    @property
    def image(self) -> str | None:
        """Primary image, used for order and report snapshots."""
        return self.images[0] if self.images else None

    def __eq__(self, other: Any) -> bool:
        """Compare products by business attributes, ignoring timestamps."""
        if not isinstance(other, Product):
            return False

        return (
            self.id == other.id
            and self.name == other.name
            and self.price == other.price
            and self.stock == other.stock
        )

    def __hash__(self) -> int:
        return hash((self.id, self.name, self.price, self.stock))
