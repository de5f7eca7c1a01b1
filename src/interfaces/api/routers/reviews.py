"""Reviews router: listing reviews, ratings and review embedding upkeep."""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, status

from src.application.services.review_service import ReviewService
from src.domain.exceptions import MarketplaceError
from src.interfaces.api.dependencies import get_current_user_id, get_review_service
from src.interfaces.api.errors import to_http_exception
from src.interfaces.api.schemas.review import (
    RatingResponse,
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
)

router = APIRouter(tags=["reviews"])


@router.get("/listings/{listing_id}/reviews", response_model=List[ReviewResponse])
def list_reviews(
    listing_id: str,
    review_service: ReviewService = Depends(get_review_service),
) -> List[ReviewResponse]:
    """Reviews of a listing, newest first."""
    try:
        reviews = review_service.list_reviews(listing_id)
    except MarketplaceError as e:
        raise to_http_exception(e)
    return [ReviewResponse.model_validate(r) for r in reviews]


@router.get("/listings/{listing_id}/rating", response_model=RatingResponse)
def get_rating(
    listing_id: str,
    review_service: ReviewService = Depends(get_review_service),
) -> RatingResponse:
    try:
        return RatingResponse.model_validate(review_service.get_rating(listing_id))
    except MarketplaceError as e:
        raise to_http_exception(e)


@router.post(
    "/listings/{listing_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_review(
    listing_id: str,
    body: ReviewCreate,
    background_tasks: BackgroundTasks,
    review_service: ReviewService = Depends(get_review_service),
    user_id: Optional[str] = Depends(get_current_user_id),
) -> ReviewResponse:
    """Review a listing; the comment is embedded after the response is sent."""
    try:
        review = review_service.create_review(listing_id, user_id, body.rating, body.comment)
    except (MarketplaceError, ValueError) as e:
        raise to_http_exception(e)
    background_tasks.add_task(review_service.index_review, review.id)
    return ReviewResponse.model_validate(review)


@router.patch("/reviews/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: str,
    body: ReviewUpdate,
    background_tasks: BackgroundTasks,
    review_service: ReviewService = Depends(get_review_service),
    user_id: Optional[str] = Depends(get_current_user_id),
) -> ReviewResponse:
    try:
        review = review_service.update_review(review_id, user_id, **body.model_dump(exclude_unset=True))
    except (MarketplaceError, ValueError) as e:
        raise to_http_exception(e)
    background_tasks.add_task(review_service.index_review, review.id)
    return ReviewResponse.model_validate(review)


@router.delete("/reviews/{review_id}")
def delete_review(
    review_id: str,
    background_tasks: BackgroundTasks,
    review_service: ReviewService = Depends(get_review_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    try:
        review = review_service.delete_review(review_id, user_id)
    except MarketplaceError as e:
        raise to_http_exception(e)
    background_tasks.add_task(review_service.remove_review_from_index, review.id, review.listing_id)
    return {"success": True, "message": f"Review {review_id} deleted successfully"}
