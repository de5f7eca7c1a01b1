"""Search router for listings and users."""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from src.interfaces.api.schemas.listing import ListingResponse
from src.interfaces.api.schemas.search import SearchResponse, UserResult
from src.interfaces.api.dependencies import get_listing_search_service
from src.application.services.listing_search_service import ListingSearchService
from src.config.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["search"])


@router.get("/search", response_model=SearchResponse)
def search(
    query: str = Query(default="", max_length=500),
    listing_type: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    search_service: ListingSearchService = Depends(get_listing_search_service),
) -> SearchResponse:
    """
    Search listings by title, description and owner username.

    Args:
        query: Free-text query
        listing_type: Listing type filter ("All Types" for none)
        category: Category filter
        search_service: Listing search service (injected)

    Returns:
        Ranked, de-duplicated listings; pagination is left to the client
    """
    results = search_service.search(query, listing_type=listing_type, category=category)
    return SearchResponse(
        query=query,
        listing_type=listing_type,
        category=category,
        results=[ListingResponse.model_validate(listing) for listing in results],
        total=len(results),
    )


@router.get("/search/users", response_model=List[UserResult])
def search_users(
    query: str = Query(default="", max_length=200),
    search_service: ListingSearchService = Depends(get_listing_search_service),
) -> List[UserResult]:
    """Search users by username or full name."""
    return [UserResult.model_validate(p) for p in search_service.search_users(query)]
