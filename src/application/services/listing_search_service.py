"""Listing search across title, description and owner username."""

from typing import Callable, Dict, List, Optional, Tuple

from src.config.logging_config import get_logger
from src.domain.models import Listing, Profile
from src.infrastructure.database.repositories import ListingRepository, ProfileRepository

logger = get_logger(__name__)

MIN_TERM_LENGTH = 2
MIN_USER_QUERY_LENGTH = 2


class ListingSearchService:
    """Multi-term substring search with de-duplication and relevance ordering."""

    def __init__(self, listings: ListingRepository, profiles: ProfileRepository):
        self.listings = listings
        self.profiles = profiles

    @staticmethod
    def normalize_query(query: str) -> str:
        """Trim and lowercase a raw query."""
        return (query or "").strip().lower()

    @staticmethod
    def search_terms(normalized_query: str) -> List[str]:
        """Whitespace-separated terms; single-character terms are dropped."""
        return [term for term in normalized_query.split() if len(term) >= MIN_TERM_LENGTH]

    def _search_title(self, term, listing_type, category) -> List[Listing]:
        return self.listings.find_by_field_contains("title", term, listing_type, category)

    def _search_description(self, term, listing_type, category) -> List[Listing]:
        return self.listings.find_by_field_contains("description", term, listing_type, category)

    def _search_username(self, term, listing_type, category) -> List[Listing]:
        # Two steps: matching profile ids, then listings owned by any of them
        user_ids = self.profiles.find_ids_by_username_contains(term)
        if not user_ids:
            logger.debug(f"No profiles found matching '{term}'")
            return []
        logger.debug(f"Found {len(user_ids)} profiles matching '{term}'")
        return self.listings.find_by_owner_ids(user_ids, listing_type, category)

    def _lookups(self) -> List[Tuple[str, Callable]]:
        return [
            ("title", self._search_title),
            ("description", self._search_description),
            ("username", self._search_username),
        ]

    @staticmethod
    def rank(listings: List[Listing], normalized_query: str) -> List[Listing]:
        """
        Order listings by relevance to the full normalized query.

        Exact title matches first, then titles containing the query, then the
        rest; ties broken by creation time, newest first.
        """
        def tier(listing: Listing) -> int:
            title = (listing.title or "").lower()
            if title == normalized_query:
                return 0
            if normalized_query in title:
                return 1
            return 2

        def recency(listing: Listing) -> float:
            return listing.created_at.timestamp() if listing.created_at else 0.0

        return sorted(listings, key=lambda l: (tier(l), -recency(l)))

    def search(
        self,
        query: str,
        listing_type: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[Listing]:
        """
        Search listings by title, description and owner username.

        Args:
            query: Free-text query
            listing_type: Exact listing type filter ("All Types" means none)
            category: Exact category filter

        Returns:
            De-duplicated listings ordered by relevance; [] when the query has
            no usable terms
        """
        logger.info(f"Search params: query='{query}', listing_type={listing_type}, category={category}")

        normalized_query = self.normalize_query(query)
        terms = self.search_terms(normalized_query)
        if not terms:
            logger.info("No valid search terms")
            return []

        logger.info(f"Searching with terms: {terms}")

        merged: Dict[str, Listing] = {}
        for kind, lookup in self._lookups():
            for term in terms:
                try:
                    results = lookup(term, listing_type, category)
                except Exception as e:
                    logger.error(f"{kind.capitalize()} search error for term '{term}': {e}")
                    continue

                logger.debug(f"Found {len(results)} results for term '{term}' in {kind}")
                for listing in results:
                    # First occurrence wins
                    merged.setdefault(listing.id, listing)

        ranked = self.rank(list(merged.values()), normalized_query)
        logger.info(f"Found {len(ranked)} total results for search: '{query}'")
        return ranked

    def search_users(self, query: str) -> List[Profile]:
        """
        Search users by username or full name.

        Returns:
            Matching profiles; [] for queries shorter than two characters or
            when the store lookup fails
        """
        normalized_query = self.normalize_query(query)
        if len(normalized_query) < MIN_USER_QUERY_LENGTH:
            return []

        try:
            return self.profiles.search(normalized_query)
        except Exception as e:
            logger.error(f"Error searching users: {e}")
            return []
