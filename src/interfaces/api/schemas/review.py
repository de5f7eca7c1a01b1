"""Review, rating and review summary schemas."""

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class ReviewResponse(BaseModel):
    """Review as returned by the API."""
    id: str
    listing_id: str
    user_id: str
    username: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class ReviewUpdate(BaseModel):
    """Partial review update; omitted fields are left unchanged."""
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = None


class RatingResponse(BaseModel):
    """Average rating of a listing."""
    average: float
    count: int

    class Config:
        from_attributes = True


class ReviewSummaryRequest(BaseModel):
    listing_id: str = Field(..., min_length=1, alias="listingId")

    class Config:
        populate_by_name = True


class ReviewSummaryResponse(BaseModel):
    """Generated overview of a listing's reviews."""
    summary: str
    pros: List[str]
    cons: List[str]

    class Config:
        from_attributes = True
