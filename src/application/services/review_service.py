"""Listing reviews, ratings and review embedding maintenance."""

from typing import List, Optional

from src.config.logging_config import get_logger
from src.domain.exceptions import AuthenticationError, ConflictError, PermissionDeniedError
from src.domain.models import ListingRating, Review
from src.infrastructure.database.repositories import (
    ListingRepository,
    ListingSummaryRepository,
    ReviewRepository,
)
from src.infrastructure.embeddings.embedding_client import EmbeddingClient
from src.infrastructure.vector.listing_index import ListingVectorIndex

logger = get_logger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _check_rating(rating: int) -> None:
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")


class ReviewService:
    """
    Review CRUD plus the background jobs that keep review embeddings and the
    cached review summary in step with the reviews.

    Every change to a listing's reviews marks its cached summary stale, so the
    next summary request regenerates it.
    """

    def __init__(
        self,
        reviews: ReviewRepository,
        listings: ListingRepository,
        summaries: ListingSummaryRepository,
        embeddings: EmbeddingClient,
        review_index: ListingVectorIndex,
    ):
        self.reviews = reviews
        self.listings = listings
        self.summaries = summaries
        self.embeddings = embeddings
        self.review_index = review_index

    def list_reviews(self, listing_id: str) -> List[Review]:
        return self.reviews.list_for_listing(listing_id)

    def get_rating(self, listing_id: str) -> ListingRating:
        """Average rating rounded to one decimal, with the review count."""
        ratings = self.reviews.ratings(listing_id)
        if not ratings:
            return ListingRating(average=0.0, count=0)
        return ListingRating(average=round(sum(ratings) / len(ratings), 1), count=len(ratings))

    def create_review(
        self,
        listing_id: str,
        user_id: Optional[str],
        rating: int,
        comment: Optional[str] = None,
    ) -> Review:
        """
        Review someone else's listing.

        Raises:
            AuthenticationError: No caller
            ListingNotFoundError: Unknown listing
            PermissionDeniedError: Caller owns the listing
            ConflictError: Caller already reviewed the listing
        """
        if user_id is None:
            raise AuthenticationError("User not authenticated")
        _check_rating(rating)

        listing = self.listings.get(listing_id)
        if listing.user_id == user_id:
            raise PermissionDeniedError("You cannot review your own listing")
        if self.reviews.find_by_author(listing_id, user_id) is not None:
            raise ConflictError("You have already reviewed this listing")

        review = self.reviews.create(listing_id, user_id, rating, comment)
        logger.info(f"Created review {review.id} on listing {listing_id}")
        return review

    def _owned(self, review_id: str, user_id: Optional[str]) -> Review:
        if user_id is None:
            raise AuthenticationError("User not authenticated")
        review = self.reviews.get(review_id)
        if review.user_id != user_id:
            raise PermissionDeniedError(f"Review {review_id} belongs to another user")
        return review

    def update_review(self, review_id: str, user_id: Optional[str], **fields) -> Review:
        self._owned(review_id, user_id)
        if fields.get("rating") is not None:
            _check_rating(fields["rating"])
        return self.reviews.update(review_id, **{k: v for k, v in fields.items() if v is not None})

    def delete_review(self, review_id: str, user_id: Optional[str]) -> Review:
        """Delete the caller's review; returns the deleted review."""
        review = self._owned(review_id, user_id)
        self.reviews.delete(review_id)
        logger.info(f"Deleted review {review_id}")
        return review

    def index_review(self, review_id: str) -> bool:
        """Embed a review comment and mark the listing's summary stale."""
        try:
            review = self.reviews.get(review_id)
            comment = (review.comment or "").strip()
            if comment:
                embedding = self.embeddings.embed(comment)
                self.review_index.upsert(review.id, embedding, metadata={"listing_id": review.listing_id})
            else:
                self.review_index.remove(review.id)
            self.summaries.mark_stale(review.listing_id)
        except Exception as e:
            logger.error(f"Embedding indexing failed for review {review_id}: {e}")
            return False
        logger.info(f"Indexed review {review_id}")
        return True

    def remove_review_from_index(self, review_id: str, listing_id: str) -> bool:
        try:
            self.review_index.remove(review_id)
            self.summaries.mark_stale(listing_id)
        except Exception as e:
            logger.error(f"Embedding removal failed for review {review_id}: {e}")
            return False
        return True
