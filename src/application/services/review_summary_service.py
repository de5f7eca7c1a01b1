"""Retrieval-grounded summaries of a listing's reviews."""

from typing import Any, List, Optional

from src.config.settings import settings
from src.config.logging_config import get_logger
from src.domain.models import ReviewSummary
from src.infrastructure.database.repositories import ListingSummaryRepository, ReviewRepository
from src.infrastructure.embeddings.embedding_client import EmbeddingClient
from src.infrastructure.llm.groq_client import GroqClient
from src.infrastructure.vector.listing_index import ListingVectorIndex
from src.infrastructure.llm.prompts import (
    NO_REVIEWS_SUMMARY,
    REVIEW_SUMMARY_QUERY,
    REVIEW_SUMMARY_SYSTEM_PROMPT,
    REVIEW_SUMMARY_USER_PROMPT,
    UNAVAILABLE_SUMMARY,
)
from src.utils.formatters import render_reviews

logger = get_logger(__name__)


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


class ReviewSummaryService:
    """
    Summarize what reviewers say about a listing.

    Flow:
    1. Return the cached summary unless it was marked stale
    2. No reviews -> fixed "no reviews" summary, not cached
    3. Embed a fixed key-points query and pick the most similar reviews of
       the listing (all reviews when none clear the threshold)
    4. Ask the model for a JSON summary with pros and cons
    5. Cache the result
    """

    def __init__(
        self,
        reviews: ReviewRepository,
        summaries: ListingSummaryRepository,
        embeddings: EmbeddingClient,
        review_index: ListingVectorIndex,
        llm: GroqClient,
        similarity_threshold: Optional[float] = None,
        max_results: Optional[int] = None,
    ):
        self.reviews = reviews
        self.summaries = summaries
        self.embeddings = embeddings
        self.review_index = review_index
        self.llm = llm
        self.similarity_threshold = (
            settings.review_similarity_threshold if similarity_threshold is None else similarity_threshold
        )
        self.max_results = settings.review_match_max_results if max_results is None else max_results

    def summarize(self, listing_id: str) -> ReviewSummary:
        cached = self.summaries.get(listing_id)
        if cached is not None and not cached.needs_update and cached.summary is not None:
            logger.info(f"Serving cached review summary for listing {listing_id}")
            return ReviewSummary(summary=cached.summary, pros=cached.pros, cons=cached.cons)

        reviews = self.reviews.list_for_listing(listing_id)
        if not reviews:
            return ReviewSummary(summary=NO_REVIEWS_SUMMARY)

        query_embedding = self.embeddings.embed(REVIEW_SUMMARY_QUERY)
        matches = self.review_index.match_reviews(
            query_embedding,
            listing_id,
            similarity_threshold=self.similarity_threshold,
            max_results=self.max_results,
        )
        matched_ids = {m.id for m in matches}
        relevant = [r for r in reviews if r.id in matched_ids] or reviews
        logger.info(f"Summarizing {len(relevant)}/{len(reviews)} reviews for listing {listing_id}")

        parsed = self.llm.extract_json(
            REVIEW_SUMMARY_SYSTEM_PROMPT,
            REVIEW_SUMMARY_USER_PROMPT.format(reviews=render_reviews(relevant)),
            temperature=settings.chat_temperature,
            max_tokens=settings.chat_max_tokens,
        )
        summary = ReviewSummary(
            summary=str(parsed.get("summary") or "").strip() or UNAVAILABLE_SUMMARY,
            pros=_string_list(parsed.get("pros")),
            cons=_string_list(parsed.get("cons")),
        )

        try:
            self.summaries.store(listing_id, summary)
        except Exception as e:
            logger.warning(f"Could not cache review summary for listing {listing_id}: {e}")
        return summary
