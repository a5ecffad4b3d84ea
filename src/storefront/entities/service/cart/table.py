"""Cart database table models."""

from sqlmodel import Field, SQLModel

from src.storefront.entities.core._base import EntityTable


class CartTable(EntityTable, table=True):
    """One row per user cart."""

    __tablename__ = "carts"

    user_id: str = Field(foreign_key="users.id", index=True, unique=True)


class CartItemTable(SQLModel, table=True):
    """Cart lines, ordered by ``position``."""

    __tablename__ = "cart_items"

    id: str = Field(primary_key=True)
    cart_id: str = Field(foreign_key="carts.id", index=True)
    product_id: str = Field(foreign_key="products.id")
    quantity: int
    price: float
    position: int = Field(default=0)
