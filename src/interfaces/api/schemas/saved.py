"""Saved listing schemas."""

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel

from src.interfaces.api.schemas.listing import ListingResponse


class SavedListingResponse(BaseModel):
    """Bookmark with the full listing."""
    id: str
    listing_id: str
    saved_at: Optional[datetime] = None
    listing: ListingResponse

    class Config:
        from_attributes = True


class SavedListingListResponse(BaseModel):
    saved: List[SavedListingResponse]
    total: int


class SavedStatusResponse(BaseModel):
    listing_id: str
    saved: bool
