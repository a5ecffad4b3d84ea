"""Review repository for data access operations."""

from sqlalchemy import delete, func, update
from sqlmodel import Session, col, select

from src.storefront.entities.core._base import utcnow

from .entity import Review
from .table import ReviewTable


class ReviewRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, review_id: str) -> Review | None:
        row = self._session.get(ReviewTable, review_id)
        if row is None:
            return None
        return Review.model_validate(row, from_attributes=True)

    def find_by_user(self, product_id: str, user_id: str) -> Review | None:
        statement = select(ReviewTable).where(
            (ReviewTable.product_id == product_id) & (ReviewTable.user_id == user_id)
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Review.model_validate(row, from_attributes=True)

    def list_for_product(self, product_id: str) -> list[Review]:
        statement = (
            select(ReviewTable)
            .where(ReviewTable.product_id == product_id)
            .order_by(col(ReviewTable.created_at).desc())
        )
        return [
            Review.model_validate(row, from_attributes=True)
            for row in self._session.exec(statement).all()
        ]

    def rating_stats(self, product_id: str) -> tuple[float | None, int]:
        """Mean rating and review count for a product."""
        statement = select(func.avg(ReviewTable.rating), func.count()).where(
            ReviewTable.product_id == product_id
        )
        average, count = self._session.exec(statement).one()
        return (float(average) if average is not None else None), int(count)

    def create(self, review: Review) -> Review:
        row = ReviewTable.model_validate(review.model_dump())
        self._session.add(row)
        self._session.flush()
        return review

    def increment_helpful(self, review_id: str) -> Review | None:
        statement = (
            update(ReviewTable)
            .where(col(ReviewTable.id) == review_id)
            .values(helpful=ReviewTable.helpful + 1, updated_at=utcnow())
        )
        result = self._session.exec(statement)  # type: ignore[call-overload]
        if result.rowcount != 1:
            return None
        row = self._session.get(ReviewTable, review_id, populate_existing=True)
        return Review.model_validate(row, from_attributes=True)

    def delete(self, review_id: str) -> bool:
        row = self._session.get(ReviewTable, review_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def delete_for_order(self, order_id: str) -> set[str]:
        """Delete the reviews written against an order; returns the reviewed product ids."""
        rows = self._session.exec(select(ReviewTable).where(ReviewTable.order_id == order_id)).all()
        product_ids = {row.product_id for row in rows}
        for row in rows:
            self._session.delete(row)
        self._session.flush()
        return product_ids

    def delete_for_product(self, product_id: str) -> int:
        statement = delete(ReviewTable).where(col(ReviewTable.product_id) == product_id)
        result = self._session.exec(statement)  # type: ignore[call-overload]
        return result.rowcount
