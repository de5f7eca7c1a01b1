"""Router for chat session management."""

from fastapi import APIRouter, Depends
from typing import List, Dict, Any, Optional

from src.interfaces.api.dependencies import get_chat_service, get_current_user_id
from src.interfaces.api.errors import to_http_exception
from src.interfaces.api.schemas.chat import MessageResponse, SessionRename, SessionResponse
from src.application.services.chat_service import ChatService
from src.domain.exceptions import MarketplaceError

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.get("", response_model=List[SessionResponse])
def list_sessions(
    chat_service: ChatService = Depends(get_chat_service),
    user_id: Optional[str] = Depends(get_current_user_id),
) -> List[SessionResponse]:
    """List the caller's sessions, most recently active first."""
    try:
        sessions = chat_service.list_sessions(user_id)
    except MarketplaceError as e:
        raise to_http_exception(e)
    return [SessionResponse.model_validate(s) for s in sessions]


@router.get("/{session_id}/messages", response_model=List[MessageResponse])
def get_session_messages(
    session_id: str,
    chat_service: ChatService = Depends(get_chat_service),
    user_id: Optional[str] = Depends(get_current_user_id),
) -> List[MessageResponse]:
    """Get the stored messages of a session in creation order."""
    try:
        messages = chat_service.get_messages(session_id, user_id)
    except MarketplaceError as e:
        raise to_http_exception(e)
    return [MessageResponse.model_validate(m) for m in messages]


@router.patch("/{session_id}", response_model=SessionResponse)
def rename_session(
    session_id: str,
    body: SessionRename,
    chat_service: ChatService = Depends(get_chat_service),
    user_id: Optional[str] = Depends(get_current_user_id),
) -> SessionResponse:
    """Rename a session."""
    try:
        session = chat_service.rename_session(session_id, body.name, user_id)
    except (MarketplaceError, ValueError) as e:
        raise to_http_exception(e)
    return SessionResponse.model_validate(session)


@router.delete("/{session_id}")
def delete_session(
    session_id: str,
    chat_service: ChatService = Depends(get_chat_service),
    user_id: Optional[str] = Depends(get_current_user_id),
) -> Dict[str, Any]:
    """Delete a session and its messages."""
    try:
        chat_service.delete_session(session_id, user_id)
    except MarketplaceError as e:
        raise to_http_exception(e)
    return {"success": True, "message": f"Session {session_id} deleted successfully"}
