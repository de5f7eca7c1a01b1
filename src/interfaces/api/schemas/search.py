"""Search response schemas."""

from typing import Optional, List
from pydantic import BaseModel, Field

from src.interfaces.api.schemas.listing import ListingResponse


class SearchResponse(BaseModel):
    """Listing search response schema."""
    query: str
    listing_type: Optional[str] = None
    category: Optional[str] = None
    results: List[ListingResponse] = Field(default_factory=list)
    total: int = 0


class UserResult(BaseModel):
    """Profile returned by user search."""
    id: str
    username: str
    full_name: Optional[str] = None
    profile_picture: Optional[str] = None

    class Config:
        from_attributes = True
