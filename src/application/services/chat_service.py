"""Chat assistant turns and chat session management."""

import asyncio
from typing import Dict, List, Optional, Sequence

from src.application.services.context_assembler import ContextAssembler
from src.config.settings import settings
from src.config.logging_config import get_logger
from src.domain.exceptions import (
    AuthenticationError,
    PermissionDeniedError,
    SessionNotFoundError,
)
from src.domain.models import ChatMessage, ChatSessionRecord, ChatTurnResult, ContextBundle
from src.infrastructure.database.repositories import ChatRepository
from src.infrastructure.embeddings.embedding_client import EmbeddingClient
from src.infrastructure.llm.groq_client import GroqClient
from src.infrastructure.llm.prompts import (
    CHAT_SYSTEM_PROMPT,
    CONTEXT_USAGE_INSTRUCTION,
    EMPTY_COMPLETION_REPLY,
)
from src.utils.formatters import render_context

logger = get_logger(__name__)


def build_prompt_messages(
    message: str,
    history: Sequence[ChatMessage],
    context_text: str,
) -> List[Dict[str, str]]:
    """
    Assemble the completion request.

    The system message carries the assistant instructions followed by the
    context block (if any); history follows as alternating user/assistant
    turns, then the new user message.
    """
    instruction = CONTEXT_USAGE_INSTRUCTION if context_text else ""
    system_content = CHAT_SYSTEM_PROMPT.format(context_instruction=instruction)
    if context_text:
        system_content += "\n\n" + context_text.rstrip()

    messages = [{"role": "system", "content": system_content}]
    for turn in history:
        role = "user" if turn.sender == "user" else "assistant"
        messages.append({"role": role, "content": turn.text})
    messages.append({"role": "user", "content": message})
    return messages


class ChatService:
    """Runs chat turns: session resolution, context gathering, completion, persistence."""

    def __init__(
        self,
        chats: ChatRepository,
        embeddings: EmbeddingClient,
        context_assembler: ContextAssembler,
        llm: GroqClient,
    ):
        self.chats = chats
        self.embeddings = embeddings
        self.context_assembler = context_assembler
        self.llm = llm
        self.placeholder_prefix = settings.placeholder_session_prefix

    def is_placeholder(self, session_id: str) -> bool:
        """Client-generated ids exist only until the first message is stored."""
        return session_id.startswith(self.placeholder_prefix)

    def _owned_session(self, session_id: str, user_id: Optional[str]) -> ChatSessionRecord:
        if user_id is None:
            raise AuthenticationError("User not authenticated")
        session = self.chats.get_session(session_id)
        if session.user_id != user_id:
            raise PermissionDeniedError(f"Session {session_id} belongs to another user")
        return session

    def resolve_session(self, session_id: str, user_id: Optional[str]) -> str:
        """
        Map the supplied session id to a persisted one.

        Placeholder ids create a new session owned by the caller; persisted
        ids are reused after an ownership check.

        Raises:
            AuthenticationError: No caller
            SessionNotFoundError: Persisted id does not exist
            PermissionDeniedError: Session owned by someone else
        """
        if self.is_placeholder(session_id):
            if user_id is None:
                raise AuthenticationError("User not authenticated")
            session = self.chats.create_session(user_id, settings.default_session_name)
            logger.info(f"Promoted placeholder session {session_id} to {session.id}")
            return session.id

        # Stricter than plain reuse: a persisted id is only accepted from its
        # owner, matching the row-level access rules on chat_sessions
        return self._owned_session(session_id, user_id).id

    def compose_messages(
        self,
        message: str,
        history: Sequence[ChatMessage],
        bundle: ContextBundle,
    ) -> List[Dict[str, str]]:
        context_text = render_context(bundle, settings.description_preview_chars)
        return build_prompt_messages(message, history, context_text)

    async def handle_turn(
        self,
        message: str,
        session_id: str,
        history: Sequence[ChatMessage],
        user_id: Optional[str],
    ) -> ChatTurnResult:
        """
        Answer one user message.

        The user message is stored before the completion runs and is left in
        place if a later step fails.

        Args:
            message: Inbound user message
            session_id: Placeholder or persisted session id
            history: Conversation so far as held by the client, oldest first
            user_id: Authenticated caller, if any

        Returns:
            Reply text and the persisted session id

        Raises:
            MarketplaceError: Any fatal step (auth, store, embedding, completion)
        """
        resolved_id = await asyncio.to_thread(self.resolve_session, session_id, user_id)
        await asyncio.to_thread(self.chats.add_message, resolved_id, "user", message)

        query_embedding = await asyncio.to_thread(self.embeddings.embed, message)
        bundle = await self.context_assembler.gather(message, history, query_embedding)

        messages = self.compose_messages(message, history, bundle)
        reply = await asyncio.to_thread(
            self.llm.chat_completion,
            messages,
            temperature=settings.chat_temperature,
            max_tokens=settings.chat_max_tokens,
        )
        reply = reply or EMPTY_COMPLETION_REPLY

        await asyncio.to_thread(self.chats.add_message, resolved_id, "bot", reply)
        logger.info(f"Chat turn completed for session {resolved_id}")

        return ChatTurnResult(response=reply, session_id=resolved_id)

    def list_sessions(self, user_id: Optional[str]) -> List[ChatSessionRecord]:
        if user_id is None:
            raise AuthenticationError("User not authenticated")
        return self.chats.list_sessions(user_id)

    def get_messages(self, session_id: str, user_id: Optional[str]) -> List[ChatMessage]:
        if self.is_placeholder(session_id):
            return []
        self._owned_session(session_id, user_id)
        return self.chats.get_messages(session_id)

    def rename_session(self, session_id: str, name: str, user_id: Optional[str]) -> ChatSessionRecord:
        name = (name or "").strip()
        if not name:
            raise ValueError("Session name must not be blank")
        if self.is_placeholder(session_id):
            raise SessionNotFoundError(session_id)
        self._owned_session(session_id, user_id)
        return self.chats.rename_session(session_id, name)

    def delete_session(self, session_id: str, user_id: Optional[str]) -> None:
        if self.is_placeholder(session_id):
            return
        self._owned_session(session_id, user_id)
        self.chats.delete_session(session_id)
        logger.info(f"Deleted chat session {session_id}")
