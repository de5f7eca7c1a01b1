"""Listing schemas."""

from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime

from src.domain.models import ListingType


class ListingResponse(BaseModel):
    """Listing as returned by the API."""
    id: str
    title: str
    description: str
    category: str
    listing_type: str
    price: Optional[float] = None
    image_url: Optional[str] = None
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ListingCreate(BaseModel):
    """Listing creation payload."""
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    category: str = Field(..., min_length=1, max_length=255)
    listing_type: ListingType
    price: Optional[float] = Field(default=None, ge=0)
    image_url: Optional[str] = None


class ListingUpdate(BaseModel):
    """Partial listing update; omitted fields are left unchanged."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=255)
    listing_type: Optional[ListingType] = None
    price: Optional[float] = Field(default=None, ge=0)
    image_url: Optional[str] = None


class ListingListResponse(BaseModel):
    """Listing collection response."""
    listings: List[ListingResponse]
    total: int
