"""Review database table model."""

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from src.storefront.entities.core._base import EntityTable


class ReviewTable(EntityTable, table=True):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("product_id", "user_id", name="uq_reviews_product_user"),
    )

    product_id: str = Field(foreign_key="products.id", index=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    user_name: str
    order_id: str = Field(foreign_key="orders.id")
    rating: int
    title: str
    comment: str
    helpful: int = Field(default=0)
