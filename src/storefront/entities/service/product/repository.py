"""Product repository for data access operations."""

from sqlalchemy import func, or_, update
from sqlmodel import Session, col, select

from src.storefront.entities.core._base import utcnow

from .entity import Product
from .table import ProductTable

_MUTABLE_FIELDS = (
    "name",
    "description",
    "price",
    "sale_price",
    "category",
    "brand",
    "images",
    "stock",
    "rating",
    "num_reviews",
    "features",
    "specifications",
    "is_active",
    "is_on_sale",
    "is_new",
    "slug",
)


def _contains_pattern(keyword: str) -> str:
    """Case-folded LIKE pattern matching ``keyword`` literally anywhere."""
    escaped = keyword.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ProductRepository:
    """Repository for Product entity data access operations."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, product_id: str) -> Product | None:
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return None
        return Product.model_validate(row, from_attributes=True)

    def get_by_slug(self, slug: str) -> Product | None:
        statement = select(ProductTable).where(ProductTable.slug == slug)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Product.model_validate(row, from_attributes=True)

    def search(
        self,
        *,
        keyword: str | None = None,
        category: str | None = None,
        active_only: bool = True,
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[Product], int]:
        """Return one page of matching products and the total match count."""
        conditions = []
        if active_only:
            conditions.append(col(ProductTable.is_active).is_(True))
        if keyword:
            pattern = _contains_pattern(keyword)
            conditions.append(
                or_(
                    func.lower(ProductTable.name).like(pattern, escape="\\"),
                    func.lower(ProductTable.category).like(pattern, escape="\\"),
                )
            )
        if category:
            conditions.append(func.lower(ProductTable.category) == category.lower())

        count_statement = select(func.count()).select_from(ProductTable).where(*conditions)
        total = self._session.exec(count_statement).one()

        statement = (
            select(ProductTable)
            .where(*conditions)
            .order_by(col(ProductTable.created_at).desc(), col(ProductTable.name))
            .offset(offset)
        )
        if limit is not None:
            statement = statement.limit(limit)
        rows = self._session.exec(statement).all()
        return [Product.model_validate(row, from_attributes=True) for row in rows], total

    def list_categories(self) -> list[str]:
        statement = (
            select(ProductTable.category)
            .where(col(ProductTable.is_active).is_(True))
            .distinct()
            .order_by(ProductTable.category)
        )
        return list(self._session.exec(statement).all())

    def create(self, product: Product) -> Product:
        row = ProductTable.model_validate(product.model_dump())
        self._session.add(row)
        self._session.flush()
        return product

    def update(self, product: Product) -> Product:
        row = self._session.get(ProductTable, product.id)
        if row is None:
            raise ValueError(f"Product {product.id} not found")

        for field in _MUTABLE_FIELDS:
            setattr(row, field, getattr(product, field))
        row.updated_at = utcnow()
        self._session.add(row)
        self._session.flush()
        return Product.model_validate(row, from_attributes=True)

    def delete(self, product_id: str) -> bool:
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def try_decrement_stock(self, product_id: str, quantity: int) -> bool:
        """Atomically take ``quantity`` units if at least that many remain.

        Returns False when the product is missing or the stock is short; the
        row is left untouched in that case.
        """
        statement = (
            update(ProductTable)
            .where(col(ProductTable.id) == product_id)
            .where(col(ProductTable.stock) >= quantity)
            .values(stock=ProductTable.stock - quantity, updated_at=utcnow())
        )
        result = self._session.exec(statement)  # type: ignore[call-overload]
        return result.rowcount == 1

    def increment_stock(self, product_id: str, quantity: int) -> None:
        statement = (
            update(ProductTable)
            .where(col(ProductTable.id) == product_id)
            .values(stock=ProductTable.stock + quantity, updated_at=utcnow())
        )
        self._session.exec(statement)  # type: ignore[call-overload]

    def set_rating(self, product_id: str, rating: float, num_reviews: int) -> None:
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return
        row.rating = rating
        row.num_reviews = num_reviews
        row.updated_at = utcnow()
        self._session.add(row)
        self._session.flush()
