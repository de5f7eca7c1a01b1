"""Listing catalogue operations and embedding index maintenance."""

from typing import List, Optional

from src.config.logging_config import get_logger
from src.domain.exceptions import AuthenticationError, PermissionDeniedError
from src.domain.models import Listing
from src.infrastructure.database.repositories import ListingRepository
from src.infrastructure.embeddings.embedding_client import EmbeddingClient
from src.infrastructure.vector.listing_index import ListingVectorIndex

logger = get_logger(__name__)


class ListingService:
    """
    CRUD over listings plus the indexing jobs that keep the vector index in
    step with them.

    `index_listing` and `remove_from_index` are meant to run as background
    tasks after the write has been acknowledged: they never raise, and report
    success as a bool so failures stay visible in logs and to batch callers.
    """

    def __init__(
        self,
        listings: ListingRepository,
        embeddings: EmbeddingClient,
        vector_index: ListingVectorIndex,
    ):
        self.listings = listings
        self.embeddings = embeddings
        self.vector_index = vector_index

    def list_listings(
        self,
        listing_type: Optional[str] = None,
        category: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[Listing]:
        return self.listings.list_listings(listing_type, category, user_id)

    def get_listing(self, listing_id: str) -> Listing:
        return self.listings.get(listing_id)

    def create_listing(self, user_id: Optional[str], **fields) -> Listing:
        if user_id is None:
            raise AuthenticationError("User not authenticated")
        listing = self.listings.create(user_id, **fields)
        logger.info(f"Created listing {listing.id} for user {user_id}")
        return listing

    def _owned(self, listing_id: str, user_id: Optional[str]) -> Listing:
        if user_id is None:
            raise AuthenticationError("User not authenticated")
        listing = self.listings.get(listing_id)
        if listing.user_id != user_id:
            raise PermissionDeniedError(f"Listing {listing_id} belongs to another user")
        return listing

    def update_listing(self, listing_id: str, user_id: Optional[str], **fields) -> Listing:
        self._owned(listing_id, user_id)
        return self.listings.update(listing_id, **fields)

    def delete_listing(self, listing_id: str, user_id: Optional[str]) -> None:
        self._owned(listing_id, user_id)
        self.listings.delete(listing_id)
        logger.info(f"Deleted listing {listing_id}")

    def index_listing(self, listing_id: str) -> bool:
        """Embed a listing and upsert it into the vector index."""
        try:
            listing = self.listings.get(listing_id)
            embedding = self.embeddings.embed_listing(listing)
            self.vector_index.upsert(listing.id, embedding)
        except Exception as e:
            logger.error(f"Embedding indexing failed for listing {listing_id}: {e}")
            return False
        logger.info(f"Indexed embedding for listing {listing_id}")
        return True

    def remove_from_index(self, listing_id: str) -> bool:
        try:
            self.vector_index.remove(listing_id)
        except Exception as e:
            logger.error(f"Embedding removal failed for listing {listing_id}: {e}")
            return False
        return True

    def reindex_all(self) -> dict:
        """Index every listing; returns counts of indexed and failed listings."""
        indexed, failed = 0, 0
        for listing in self.listings.list_listings():
            if self.index_listing(listing.id):
                indexed += 1
            else:
                failed += 1
        return {"indexed": indexed, "failed": failed}
