"""User domain entity."""

from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator

from src.storefront.entities.core._base import Entity


class UserRole(StrEnum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class User(Entity):
    """A shopper or store administrator.

    The profile fields double as the default shipping details at checkout.
    """

    name: str = Field(description="Display name")
    email: str = Field(description="Login email, stored lower-cased")
    password_hash: str = Field(default="", exclude=True, repr=False)
    role: UserRole = Field(default=UserRole.CUSTOMER)
    phone: str | None = Field(default=None, description="Contact phone number")
    address: str | None = Field(default=None, description="Street address")
    city: str | None = Field(default=None)
    district: str | None = Field(default=None)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.id == other.id
            and self.name == other.name
            and self.email == other.email
            and self.role == other.role
        )

    def __hash__(self) -> int:
        return hash((self.id, self.name, self.email, self.role))
