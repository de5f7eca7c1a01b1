"""Typed records for everything that crosses the store boundary."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

ListingType = Literal["Providing Skills", "Looking for Skills", "Trading Skills"]
Sender = Literal["user", "bot"]


class Listing(BaseModel):
    """A marketplace offer or request."""
    id: str
    title: str
    description: str = ""
    category: str
    listing_type: ListingType
    price: Optional[float] = None
    image_url: Optional[str] = None
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Profile(BaseModel):
    """Public profile of a marketplace user."""
    id: str
    username: str
    full_name: Optional[str] = None
    profile_picture: Optional[str] = None

    class Config:
        from_attributes = True


class ChatMessage(BaseModel):
    """One turn of a conversation."""
    sender: Sender
    text: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChatSessionRecord(BaseModel):
    """Persisted chat session header."""
    id: str
    name: str
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SimilarityMatch(BaseModel):
    """Row returned by a vector-similarity lookup."""
    id: str
    similarity: float


class CategoryExamples(BaseModel):
    """Example listings for a category keyword mentioned in chat."""
    category: str
    examples: List[Listing] = Field(default_factory=list)


class ContextBundle(BaseModel):
    """Retrieved snippets used to ground one chat completion."""
    relevant_listings: List[Listing] = Field(default_factory=list)
    similar_listings: List[Listing] = Field(default_factory=list)
    category_examples: List[CategoryExamples] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.relevant_listings or self.similar_listings or self.category_examples)


class ChatTurnResult(BaseModel):
    """Outcome of a completed chat turn."""
    response: str
    session_id: str


class Review(BaseModel):
    """A rating with an optional comment left on someone else's listing."""
    id: str
    listing_id: str
    user_id: str
    rating: int
    comment: Optional[str] = None
    username: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ListingRating(BaseModel):
    average: float = 0.0
    count: int = 0


class SavedListing(BaseModel):
    """A listing bookmarked by a user."""
    id: str
    user_id: str
    listing_id: str
    saved_at: Optional[datetime] = None
    listing: Listing

    class Config:
        from_attributes = True


class ReviewSummary(BaseModel):
    """Generated overview of a listing's reviews."""
    summary: str
    pros: List[str] = Field(default_factory=list)
    cons: List[str] = Field(default_factory=list)


class CachedReviewSummary(ReviewSummary):
    """Stored summary; `needs_update` is set whenever the listing's reviews change."""
    listing_id: str
    summary: Optional[str] = None
    needs_update: bool = True
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
