"""Common schemas used across the API."""

from typing import Optional
from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response schema."""
    status: str
    search_service: bool
    chat_service: bool
    listing_service: bool
    review_service: bool
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Body returned by routes that report failures as {"error": ...}."""
    error: str
