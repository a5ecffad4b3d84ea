"""User database table model."""

from sqlmodel import Field

from src.storefront.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users."""

    __tablename__ = "users"

    name: str
    email: str = Field(index=True, unique=True)
    password_hash: str
    role: str = Field(default="customer")
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    district: str | None = None
