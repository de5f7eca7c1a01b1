"""Gathers retrieval context for one chat turn."""

import asyncio
from typing import Awaitable, List, Optional, Sequence

from src.config.settings import settings
from src.config.logging_config import get_logger
from src.domain.models import CategoryExamples, ChatMessage, ContextBundle, Listing
from src.infrastructure.database.repositories import ListingRepository
from src.infrastructure.vector.listing_index import ListingVectorIndex
from src.utils.text_extraction import (
    mentioned_categories,
    most_recent_listing_reference,
    scan_texts,
)

logger = get_logger(__name__)


class ContextAssembler:
    """
    Runs three independent lookups and bundles what they find.

    - relevant: listings whose embedding is close to the message embedding
    - similar: listings close to the most recently referenced /listings/{id}
    - categories: example listings for each category keyword mentioned

    Each branch degrades to an empty contribution on failure.
    """

    def __init__(
        self,
        listings: ListingRepository,
        vector_index: ListingVectorIndex,
        similarity_threshold: Optional[float] = None,
        match_max_results: Optional[int] = None,
        similar_max_results: Optional[int] = None,
        category_examples_limit: Optional[int] = None,
        history_scan_depth: Optional[int] = None,
    ):
        self.listings = listings
        self.vector_index = vector_index
        self.similarity_threshold = (
            settings.similarity_threshold if similarity_threshold is None else similarity_threshold
        )
        self.match_max_results = (
            settings.match_max_results if match_max_results is None else match_max_results
        )
        self.similar_max_results = (
            settings.similar_max_results if similar_max_results is None else similar_max_results
        )
        self.category_examples_limit = (
            settings.category_examples_limit if category_examples_limit is None else category_examples_limit
        )
        self.history_scan_depth = (
            settings.history_scan_depth if history_scan_depth is None else history_scan_depth
        )

    def scanned_texts(self, message: str, history: Sequence[ChatMessage]) -> List[str]:
        """The message plus the trailing history entries that are scanned."""
        trailing = history[-self.history_scan_depth:] if self.history_scan_depth > 0 else []
        return scan_texts(message, [m.text for m in trailing])

    def relevant_listings(self, query_embedding: Sequence[float]) -> List[Listing]:
        matches = self.vector_index.match_listings(
            query_embedding,
            similarity_threshold=self.similarity_threshold,
            max_results=self.match_max_results,
        )
        if not matches:
            return []
        return self.listings.get_by_ids([m.id for m in matches])

    def similar_listings(self, texts: Sequence[str]) -> List[Listing]:
        listing_id = most_recent_listing_reference(texts)
        if listing_id is None:
            return []

        logger.info(f"Fetching listings similar to referenced listing {listing_id}")
        matches = self.vector_index.similar_listings(
            listing_id,
            similarity_threshold=self.similarity_threshold,
            max_results=self.similar_max_results,
        )
        if not matches:
            return []
        return self.listings.get_by_ids([m.id for m in matches])

    def _examples_for(self, category: str) -> CategoryExamples:
        try:
            examples = self.listings.find_by_category_contains(category, self.category_examples_limit)
        except Exception as e:
            logger.warning(f"Category example lookup failed for '{category}': {e}")
            examples = []
        return CategoryExamples(category=category, examples=examples)

    async def category_examples(self, texts: Sequence[str]) -> List[CategoryExamples]:
        categories = mentioned_categories(texts)
        if not categories:
            return []
        return list(await asyncio.gather(
            *(asyncio.to_thread(self._examples_for, category) for category in categories)
        ))

    @staticmethod
    async def _degrade(branch: str, pending: Awaitable) -> list:
        try:
            return await pending
        except Exception as e:
            logger.warning(f"Context branch '{branch}' failed, continuing without it: {e}")
            return []

    async def gather(
        self,
        message: str,
        history: Sequence[ChatMessage],
        query_embedding: Sequence[float],
    ) -> ContextBundle:
        """
        Gather all context for a message.

        Args:
            message: Inbound user message
            history: Conversation so far, oldest first
            query_embedding: Embedding of `message`

        Returns:
            ContextBundle; never raises for lookup failures
        """
        texts = self.scanned_texts(message, history)

        relevant, similar, categories = await asyncio.gather(
            self._degrade("relevant", asyncio.to_thread(self.relevant_listings, query_embedding)),
            self._degrade("similar", asyncio.to_thread(self.similar_listings, texts)),
            self._degrade("categories", self.category_examples(texts)),
        )

        bundle = ContextBundle(
            relevant_listings=relevant,
            similar_listings=similar,
            category_examples=categories,
        )
        logger.info(
            f"Context gathered: {len(relevant)} relevant, {len(similar)} similar, "
            f"{len(categories)} categories"
        )
        return bundle
