"""Chat request/response schemas.

Field names follow the chat widget's camelCase wire format through aliases.
"""

from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class HistoryEntry(BaseModel):
    """One previous turn as held by the client."""
    text: str
    sender: Literal["user", "bot"]


class ChatRequest(BaseModel):
    """Chat turn request schema."""
    message: str
    session_id: str = Field(..., min_length=1, alias="sessionId")
    session_history: List[HistoryEntry] = Field(default_factory=list, alias="sessionHistory")

    class Config:
        populate_by_name = True


class ChatResponse(BaseModel):
    """Chat turn response schema."""
    response: str
    session_id: str = Field(..., serialization_alias="sessionId")


class SessionResponse(BaseModel):
    """Persisted chat session."""
    id: str
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SessionRename(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class MessageResponse(BaseModel):
    """Stored chat message."""
    sender: Literal["user", "bot"]
    text: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
