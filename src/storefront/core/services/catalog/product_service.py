"""Catalog browsing and administration."""

import math

from loguru import logger
from pydantic import BaseModel, Field
from sqlmodel import Session

from src.storefront.core.errors import NotFoundError
from src.storefront.entities.service.cart import CartRepository
from src.storefront.entities.service.product import Product, ProductRepository
from src.storefront.entities.service.product.entity import slugify
from src.storefront.entities.service.review import ReviewRepository
from src.storefront.runtime.context import get_config

_NULLABLE_FIELDS = {"sale_price", "brand"}


class ProductInput(BaseModel):
    """Admin payload for creating a product."""

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: float = Field(ge=0)
    sale_price: float | None = Field(default=None, ge=0)
    category: str = Field(min_length=1)
    brand: str | None = None
    images: list[str] = Field(default_factory=list)
    stock: int = Field(default=0, ge=0)
    features: list[str] = Field(default_factory=list)
    specifications: dict[str, str] = Field(default_factory=dict)
    is_active: bool = True
    is_on_sale: bool = False
    is_new: bool = False


class ProductPatch(BaseModel):
    """Admin payload for a partial product update."""

    name: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    price: float | None = Field(default=None, ge=0)
    sale_price: float | None = Field(default=None, ge=0)
    category: str | None = Field(default=None, min_length=1)
    brand: str | None = None
    images: list[str] | None = None
    stock: int | None = Field(default=None, ge=0)
    features: list[str] | None = None
    specifications: dict[str, str] | None = None
    is_active: bool | None = None
    is_on_sale: bool | None = None
    is_new: bool | None = None


class ProductPage(BaseModel):
    products: list[Product]
    page: int
    pages: int
    total: int


class ProductService:
    def __init__(self, db_session: Session):
        self._repo = ProductRepository(db_session)
        self._db_session = db_session

    def list_products(
        self,
        keyword: str | None = None,
        category: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> ProductPage:
        store = get_config().store
        limit = min(limit or store.default_page_size, store.max_page_size)
        page = max(page, 1)

        products, total = self._repo.search(
            keyword=keyword,
            category=category,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return ProductPage(
            products=products,
            page=page,
            pages=math.ceil(total / limit) if total else 0,
            total=total,
        )

    def get_product(self, id_or_slug: str) -> Product:
        product = self._repo.get(id_or_slug) or self._repo.get_by_slug(id_or_slug)
        if product is None:
            raise NotFoundError("Product not found")
        return product

    def list_categories(self) -> list[str]:
        return self._repo.list_categories()

    def create_product(self, data: ProductInput) -> Product:
        product = self._repo.create(Product(**data.model_dump()))
        self._db_session.commit()
        logger.bind(product_id=product.id, slug=product.slug).info("Product created")
        return product

    def update_product(self, product_id: str, changes: ProductPatch) -> Product:
        product = self._repo.get(product_id)
        if product is None:
            raise NotFoundError("Product not found")

        updates = {
            field: value
            for field, value in changes.model_dump(exclude_unset=True).items()
            if value is not None or field in _NULLABLE_FIELDS
        }
        if "name" in updates:
            updates["name"] = updates["name"].strip()
            updates["slug"] = slugify(updates["name"])
        merged = Product.model_validate({**product.model_dump(), **updates})

        updated = self._repo.update(merged)
        self._db_session.commit()
        logger.bind(product_id=product_id, fields=sorted(updates)).info("Product updated")
        return updated

    def delete_product(self, product_id: str) -> None:
        """Delete a product together with its reviews and any cart lines holding it.

        Order items keep their snapshot of the product.
        """
        if self._repo.get(product_id) is None:
            raise NotFoundError("Product not found")
        cart_lines = CartRepository(self._db_session).remove_product(product_id)
        reviews = ReviewRepository(self._db_session).delete_for_product(product_id)
        self._repo.delete(product_id)
        self._db_session.commit()
        logger.bind(product_id=product_id, cart_lines=cart_lines, reviews=reviews).info(
            "Product deleted"
        )
