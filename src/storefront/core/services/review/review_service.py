from loguru import logger
from pydantic import BaseModel, Field
from sqlmodel import Session

from src.storefront.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from src.storefront.entities.core.user import User
from src.storefront.entities.service.order import OrderRepository, OrderStatus
from src.storefront.entities.service.product import ProductRepository
from src.storefront.entities.service.review import Review, ReviewRepository


def refresh_product_rating(
    reviews: ReviewRepository, products: ProductRepository, product_id: str
) -> None:
    """Recompute the cached average rating and review count of a product."""
    average, count = reviews.rating_stats(product_id)
    rating = round(average, 1) if average is not None else 0.0
    products.set_rating(product_id, rating, count)


class ReviewInput(BaseModel):
    order_id: str
    rating: int = Field(ge=1, le=5)
    title: str = Field(min_length=1)
    comment: str = Field(min_length=1)


class ReviewService:
    """Verified-purchase product reviews."""

    def __init__(self, db_session: Session):
        self._reviews = ReviewRepository(db_session)
        self._orders = OrderRepository(db_session)
        self._products = ProductRepository(db_session)
        self._db_session = db_session

    def list_reviews(self, product_id: str) -> list[Review]:
        return self._reviews.list_for_product(product_id)

    def create_review(self, user: User, product_id: str, data: ReviewInput) -> Review:
        """Review a product from a delivered order of the user.

        Raises:
            NotFoundError: If the product does not exist
            ValidationError: If the order is not the user's delivered order for this product
            ConflictError: If the user already reviewed the product
        """
        if self._products.get(product_id) is None:
            raise NotFoundError("Product not found")

        order = self._orders.get(data.order_id)
        if order is None or order.user_id != user.id:
            raise ValidationError("Order not found for this user")
        if order.status != OrderStatus.DELIVERED:
            raise ValidationError("Only delivered orders can be reviewed")
        if not any(item.product_id == product_id for item in order.items):
            raise ValidationError("Product is not part of this order")
        if self._reviews.find_by_user(product_id, user.id) is not None:
            raise ConflictError("You have already reviewed this product")

        review = self._reviews.create(
            Review(
                product_id=product_id,
                user_id=user.id,
                user_name=user.name,
                order_id=order.id,
                rating=data.rating,
                title=data.title.strip(),
                comment=data.comment.strip(),
            )
        )
        self._refresh_rating(product_id)
        self._db_session.commit()
        logger.bind(review_id=review.id, product_id=product_id, rating=data.rating).info(
            "Review created"
        )
        return review

    def mark_helpful(self, review_id: str) -> Review:
        review = self._reviews.increment_helpful(review_id)
        if review is None:
            raise NotFoundError("Review not found")
        self._db_session.commit()
        return review

    def delete_review(self, review_id: str, user: User) -> None:
        review = self._reviews.get(review_id)
        if review is None:
            raise NotFoundError("Review not found")
        if not user.is_admin and review.user_id != user.id:
            raise PermissionDeniedError("Not allowed to delete this review")

        self._reviews.delete(review_id)
        self._refresh_rating(review.product_id)
        self._db_session.commit()
        logger.bind(review_id=review_id, product_id=review.product_id).info("Review deleted")

    def _refresh_rating(self, product_id: str) -> None:
        refresh_product_rating(self._reviews, self._products, product_id)
