"""Listings router with background embedding indexing."""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from src.application.services.listing_service import ListingService
from src.domain.exceptions import MarketplaceError
from src.interfaces.api.dependencies import get_current_user_id, get_listing_service
from src.interfaces.api.errors import to_http_exception
from src.interfaces.api.schemas.listing import (
    ListingCreate,
    ListingListResponse,
    ListingResponse,
    ListingUpdate,
)

router = APIRouter(prefix="/listings", tags=["listings"])


@router.get("", response_model=ListingListResponse)
def list_listings(
    listing_type: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    user_id: Optional[str] = Query(default=None, description="Only listings owned by this user"),
    listing_service: ListingService = Depends(get_listing_service),
) -> ListingListResponse:
    """List listings, newest first."""
    try:
        listings = listing_service.list_listings(listing_type, category, user_id)
    except MarketplaceError as e:
        raise to_http_exception(e)
    return ListingListResponse(
        listings=[ListingResponse.model_validate(l) for l in listings],
        total=len(listings),
    )


@router.get("/{listing_id}", response_model=ListingResponse)
def get_listing(
    listing_id: str,
    listing_service: ListingService = Depends(get_listing_service),
) -> ListingResponse:
    try:
        return ListingResponse.model_validate(listing_service.get_listing(listing_id))
    except MarketplaceError as e:
        raise to_http_exception(e)


@router.post("", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
def create_listing(
    body: ListingCreate,
    background_tasks: BackgroundTasks,
    listing_service: ListingService = Depends(get_listing_service),
    user_id: Optional[str] = Depends(get_current_user_id),
) -> ListingResponse:
    """Create a listing; its embedding is indexed after the response is sent."""
    try:
        listing = listing_service.create_listing(user_id, **body.model_dump())
    except MarketplaceError as e:
        raise to_http_exception(e)
    background_tasks.add_task(listing_service.index_listing, listing.id)
    return ListingResponse.model_validate(listing)


@router.patch("/{listing_id}", response_model=ListingResponse)
def update_listing(
    listing_id: str,
    body: ListingUpdate,
    background_tasks: BackgroundTasks,
    listing_service: ListingService = Depends(get_listing_service),
    user_id: Optional[str] = Depends(get_current_user_id),
) -> ListingResponse:
    """Update the caller's listing and re-index its embedding."""
    try:
        listing = listing_service.update_listing(
            listing_id, user_id, **body.model_dump(exclude_unset=True)
        )
    except MarketplaceError as e:
        raise to_http_exception(e)
    background_tasks.add_task(listing_service.index_listing, listing.id)
    return ListingResponse.model_validate(listing)


@router.delete("/{listing_id}")
def delete_listing(
    listing_id: str,
    background_tasks: BackgroundTasks,
    listing_service: ListingService = Depends(get_listing_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """Delete the caller's listing and drop its embedding."""
    try:
        listing_service.delete_listing(listing_id, user_id)
    except MarketplaceError as e:
        raise to_http_exception(e)
    background_tasks.add_task(listing_service.remove_from_index, listing_id)
    return {"success": True, "message": f"Listing {listing_id} deleted successfully"}
