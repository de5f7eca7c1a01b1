"""Saved listings router."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from src.application.services.saved_listing_service import SavedListingService
from src.domain.exceptions import MarketplaceError
from src.interfaces.api.dependencies import get_current_user_id, get_saved_listing_service
from src.interfaces.api.errors import to_http_exception
from src.interfaces.api.schemas.saved import (
    SavedListingListResponse,
    SavedListingResponse,
    SavedStatusResponse,
)

router = APIRouter(prefix="/saved-listings", tags=["saved"])


@router.get("", response_model=SavedListingListResponse)
def list_saved(
    listing_type: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    saved_service: SavedListingService = Depends(get_saved_listing_service),
    user_id: Optional[str] = Depends(get_current_user_id),
) -> SavedListingListResponse:
    """Caller's saved listings, most recently saved first."""
    try:
        saved = saved_service.list_saved(user_id, listing_type, category)
    except MarketplaceError as e:
        raise to_http_exception(e)
    return SavedListingListResponse(
        saved=[SavedListingResponse.model_validate(s) for s in saved],
        total=len(saved),
    )


@router.get("/{listing_id}", response_model=SavedStatusResponse)
def saved_status(
    listing_id: str,
    saved_service: SavedListingService = Depends(get_saved_listing_service),
    user_id: Optional[str] = Depends(get_current_user_id),
) -> SavedStatusResponse:
    try:
        saved = saved_service.is_saved(user_id, listing_id)
    except MarketplaceError as e:
        raise to_http_exception(e)
    return SavedStatusResponse(listing_id=listing_id, saved=saved)


@router.post("/{listing_id}", response_model=SavedListingResponse, status_code=status.HTTP_201_CREATED)
def save_listing(
    listing_id: str,
    saved_service: SavedListingService = Depends(get_saved_listing_service),
    user_id: Optional[str] = Depends(get_current_user_id),
) -> SavedListingResponse:
    try:
        return SavedListingResponse.model_validate(saved_service.save_listing(user_id, listing_id))
    except MarketplaceError as e:
        raise to_http_exception(e)


@router.delete("/{listing_id}")
def unsave_listing(
    listing_id: str,
    saved_service: SavedListingService = Depends(get_saved_listing_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    try:
        saved_service.unsave_listing(user_id, listing_id)
    except MarketplaceError as e:
        raise to_http_exception(e)
    return {"success": True, "message": f"Listing {listing_id} removed from saved listings"}
