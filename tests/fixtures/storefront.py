"""Domain fixtures: users, tokens and catalog data."""

from __future__ import annotations

from collections.abc import Callable

import pytest
from sqlmodel import Session

from src.storefront.core.security import hash_password
from src.storefront.core.services import JwtGeneratorService
from src.storefront.entities import (
    Product,
    ProductRepository,
    User,
    UserRepository,
    UserRole,
)

__all__ = [
    "make_user",
    "customer",
    "other_customer",
    "admin",
    "token_for",
    "customer_headers",
    "admin_headers",
    "make_product",
]

PASSWORD = "s3cret-pass"


@pytest.fixture
def make_user(session: Session) -> Callable[..., User]:
    def _make_user(
        email: str = "shopper@example.com",
        name: str = "Shopper",
        role: UserRole = UserRole.CUSTOMER,
        **profile,
    ) -> User:
        user = User(
            name=name,
            email=email,
            password_hash=hash_password(PASSWORD),
            role=role,
            **profile,
        )
        UserRepository(session).create(user)
        session.commit()
        return user

    return _make_user


@pytest.fixture
def customer(make_user) -> User:
    return make_user(
        email="customer@example.com",
        name="Casey Customer",
        phone="0901234567",
        address="12 Market Street",
        city="Hanoi",
        district="Ba Dinh",
    )


@pytest.fixture
def other_customer(make_user) -> User:
    return make_user(email="other@example.com", name="Other Customer")


@pytest.fixture
def admin(make_user) -> User:
    return make_user(email="admin@example.com", name="Store Admin", role=UserRole.ADMIN)


@pytest.fixture
def token_for() -> Callable[[User], str]:
    generator = JwtGeneratorService()

    def _token_for(user: User) -> str:
        return generator.generate_access_token(
            user.id, email=user.email, roles=[str(user.role)]
        )

    return _token_for


@pytest.fixture
def customer_headers(customer: User, token_for) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_for(customer)}"}


@pytest.fixture
def admin_headers(admin: User, token_for) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_for(admin)}"}


@pytest.fixture
def make_product(session: Session) -> Callable[..., Product]:
    def _make_product(
        name: str = "Wireless Mouse",
        price: float = 20.0,
        stock: int = 10,
        category: str = "Accessories",
        **fields,
    ) -> Product:
        fields.setdefault("description", f"{name} description")
        product = Product(name=name, price=price, stock=stock, category=category, **fields)
        ProductRepository(session).create(product)
        session.commit()
        return product

    return _make_product
