"""Product review router."""

from fastapi import APIRouter, Depends

from src.storefront.api.http.deps import get_current_user, get_review_service
from src.storefront.core.services import ReviewService
from src.storefront.core.services.review.review_service import ReviewInput
from src.storefront.entities.core.user import User
from src.storefront.entities.service.review import Review

router = APIRouter(tags=["reviews"])


@router.get("/products/{product_id}/reviews", response_model=list[Review])
def list_reviews(
    product_id: str,
    reviews: ReviewService = Depends(get_review_service),
) -> list[Review]:
    """Reviews for a product, newest first."""
    return reviews.list_reviews(product_id)


@router.post("/products/{product_id}/reviews", response_model=Review, status_code=201)
def create_review(
    product_id: str,
    data: ReviewInput,
    user: User = Depends(get_current_user),
    reviews: ReviewService = Depends(get_review_service),
) -> Review:
    return reviews.create_review(user, product_id, data)


@router.post("/reviews/{review_id}/helpful", response_model=Review)
def mark_helpful(
    review_id: str,
    user: User = Depends(get_current_user),
    reviews: ReviewService = Depends(get_review_service),
) -> Review:
    return reviews.mark_helpful(review_id)


@router.delete("/reviews/{review_id}")
def delete_review(
    review_id: str,
    user: User = Depends(get_current_user),
    reviews: ReviewService = Depends(get_review_service),
) -> dict[str, str]:
    reviews.delete_review(review_id, user)
    return {"message": "Review deleted"}
