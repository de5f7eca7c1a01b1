"""Listings bookmarked by users."""

from typing import List, Optional

from src.config.logging_config import get_logger
from src.domain.exceptions import AuthenticationError, ConflictError
from src.domain.models import SavedListing
from src.infrastructure.database.repositories import SavedListingRepository

logger = get_logger(__name__)


def _require_caller(user_id: Optional[str]) -> str:
    if user_id is None:
        raise AuthenticationError("User not authenticated")
    return user_id


class SavedListingService:
    def __init__(self, saved: SavedListingRepository):
        self.saved = saved

    def list_saved(
        self,
        user_id: Optional[str],
        listing_type: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[SavedListing]:
        """Caller's saved listings, most recently saved first."""
        return self.saved.list_for_user(_require_caller(user_id), listing_type, category)

    def is_saved(self, user_id: Optional[str], listing_id: str) -> bool:
        if user_id is None:
            return False
        return self.saved.is_saved(user_id, listing_id)

    def save_listing(self, user_id: Optional[str], listing_id: str) -> SavedListing:
        user_id = _require_caller(user_id)
        if self.saved.is_saved(user_id, listing_id):
            raise ConflictError("This listing is already saved")
        saved = self.saved.save(user_id, listing_id)
        logger.info(f"User {user_id} saved listing {listing_id}")
        return saved

    def unsave_listing(self, user_id: Optional[str], listing_id: str) -> None:
        """Remove a bookmark; unsaving a listing that is not saved is a no-op."""
        self.saved.unsave(_require_caller(user_id), listing_id)
