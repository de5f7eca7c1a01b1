"""Chat router: one assistant turn per request."""

from typing import Optional

from fastapi import APIRouter, Depends

from src.application.services.chat_service import ChatService
from src.config.logging_config import get_logger
from src.domain.models import ChatMessage
from src.interfaces.api.dependencies import get_chat_service, get_current_user_id
from src.interfaces.api.errors import CHAT_FAILURE_MESSAGE, error_response
from src.interfaces.api.schemas.chat import ChatRequest, ChatResponse
from src.interfaces.api.schemas.common import ErrorResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def chat(
    request: ChatRequest,
    chat_service: ChatService = Depends(get_chat_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    Answer a chat message with retrieval context.

    Returns:
        {"response", "sessionId"} on success, {"error"} otherwise
    """
    history = [ChatMessage(sender=h.sender, text=h.text) for h in request.session_history]
    try:
        result = await chat_service.handle_turn(
            message=request.message,
            session_id=request.session_id,
            history=history,
            user_id=user_id,
        )
    except Exception as e:
        logger.error(f"Chat error for session {request.session_id}: {e}")
        return error_response(e, CHAT_FAILURE_MESSAGE)

    return ChatResponse(response=result.response, session_id=result.session_id)
