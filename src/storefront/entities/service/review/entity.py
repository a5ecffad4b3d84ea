"""Entity: Review."""

from pydantic import Field

from src.storefront.entities.core._base import Entity


class Review(Entity):
    """A customer's rating of a product they received."""

    product_id: str
    user_id: str
    user_name: str
    order_id: str
    rating: int = Field(ge=1, le=5)
    title: str = Field(min_length=1)
    comment: str = Field(min_length=1)
    helpful: int = Field(default=0, ge=0)
