"""
Tests for chat turns and session management.
"""
import asyncio

import pytest

from conftest import (
    FakeEmbeddingClient,
    FakeListingRepository,
    FakeLLM,
    FakeVectorIndex,
    add_profile,
    make_listing,
)
from src.application.services.chat_service import ChatService, build_prompt_messages
from src.application.services.context_assembler import ContextAssembler
from src.domain.exceptions import (
    AuthenticationError,
    CompletionError,
    EmbeddingError,
    PermissionDeniedError,
    SessionNotFoundError,
)
from src.domain.models import ChatMessage

LISTING_ID = "abcd1234-0000-4000-8000-000000000001"


@pytest.fixture
def user_id(session_factory) -> str:
    return add_profile(session_factory, "dana")


@pytest.fixture
def index() -> FakeVectorIndex:
    return FakeVectorIndex(matches=[LISTING_ID])


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM(reply="Try the guitar lessons at /listings/abcd1234-0000-4000-8000-000000000001")


def build_service(chat_repo, index, llm, embeddings=None) -> ChatService:
    listings = FakeListingRepository([make_listing(LISTING_ID, title="Guitar Lessons")])
    assembler = ContextAssembler(
        listings, index,
        similarity_threshold=0.6, match_max_results=5, similar_max_results=3,
        category_examples_limit=3, history_scan_depth=3,
    )
    return ChatService(
        chats=chat_repo,
        embeddings=embeddings or FakeEmbeddingClient(),
        context_assembler=assembler,
        llm=llm,
    )


def turn(service, message, session_id, user_id, history=()):
    return asyncio.run(service.handle_turn(message, session_id, list(history), user_id))


class TestSessionResolution:
    """Tests for placeholder promotion and reuse."""

    def test_placeholder_is_promoted_then_reused(self, chat_repo, index, llm, user_id):
        service = build_service(chat_repo, index, llm)

        first = turn(service, "hi", "session-1712345678", user_id)
        assert first.session_id != "session-1712345678"
        assert not first.session_id.startswith("session-")

        second = turn(service, "and more?", first.session_id, user_id)
        assert second.session_id == first.session_id
        assert len(chat_repo.list_sessions(user_id)) == 1

        messages = chat_repo.get_messages(first.session_id)
        assert [m.sender for m in messages] == ["user", "bot", "user", "bot"]

    def test_new_session_gets_default_name(self, chat_repo, index, llm, user_id):
        service = build_service(chat_repo, index, llm)
        result = turn(service, "hi", "session-1", user_id)

        assert chat_repo.get_session(result.session_id).name == "New Chat"

    def test_placeholder_requires_authenticated_caller(self, chat_repo, index, llm):
        service = build_service(chat_repo, index, llm)

        with pytest.raises(AuthenticationError):
            turn(service, "hi", "session-1", None)
        assert llm.calls == []

    def test_unknown_persisted_session(self, chat_repo, index, llm, user_id):
        service = build_service(chat_repo, index, llm)

        with pytest.raises(SessionNotFoundError):
            turn(service, "hi", "0000aaaa-missing", user_id)

    def test_session_of_another_user(self, chat_repo, index, llm, user_id, session_factory):
        intruder = add_profile(session_factory, "eve")
        service = build_service(chat_repo, index, llm)
        result = turn(service, "hi", "session-1", user_id)

        with pytest.raises(PermissionDeniedError):
            turn(service, "hi", result.session_id, intruder)

    def test_persisted_session_requires_owner_as_caller(self, chat_repo, index, llm, user_id):
        """A persisted id is not reused for an anonymous caller, and nothing is stored."""
        service = build_service(chat_repo, index, llm)
        result = turn(service, "hi", "session-1", user_id)

        with pytest.raises(AuthenticationError):
            turn(service, "still there?", result.session_id, None)
        assert len(chat_repo.get_messages(result.session_id)) == 2


class TestChatTurn:
    """Tests for the turn pipeline."""

    def test_reply_is_returned_and_persisted(self, chat_repo, index, llm, user_id):
        service = build_service(chat_repo, index, llm)
        result = turn(service, "Any guitar instructors?", "session-1", user_id)

        assert result.response == llm.reply
        messages = chat_repo.get_messages(result.session_id)
        assert [(m.sender, m.text) for m in messages] == [
            ("user", "Any guitar instructors?"),
            ("bot", llm.reply),
        ]

    def test_completion_parameters_and_prompt(self, chat_repo, index, llm, user_id):
        service = build_service(chat_repo, index, llm)
        history = [
            ChatMessage(sender="user", text="hello"),
            ChatMessage(sender="bot", text="Hi! How can I help?"),
        ]
        turn(service, "Any guitar instructors?", "session-1", user_id, history)

        call = llm.calls[0]
        assert call["temperature"] == 0.7
        assert call["max_tokens"] == 500

        messages = call["messages"]
        assert [m["role"] for m in messages] == ["system", "user", "assistant", "user"]
        assert messages[-1]["content"] == "Any guitar instructors?"
        system = messages[0]["content"]
        assert "### CONTEXT INFORMATION ###" in system
        assert "- Title: Guitar Lessons" in system
        assert "do not explicitly mention that you're using 'context' or 'database'" in system

    def test_similarity_failure_still_completes(self, chat_repo, llm, user_id):
        service = build_service(chat_repo, FakeVectorIndex(fail_match=True), llm)
        result = turn(service, "Any guitar instructors?", "session-1", user_id)

        assert result.response == llm.reply
        system = llm.calls[0]["messages"][0]["content"]
        assert "### CONTEXT INFORMATION ###" not in system
        assert "'context' or 'database'" not in system

    def test_empty_completion_uses_fallback_text(self, chat_repo, index, user_id):
        service = build_service(chat_repo, index, FakeLLM(reply=""))
        result = turn(service, "hello", "session-1", user_id)

        assert result.response == "I'm sorry, I couldn't process your request."

    def test_completion_failure_leaves_user_message(self, chat_repo, index, user_id):
        service = build_service(chat_repo, index, FakeLLM(fail=True))

        with pytest.raises(CompletionError):
            turn(service, "hello", "session-1", user_id)

        sessions = chat_repo.list_sessions(user_id)
        assert len(sessions) == 1
        messages = chat_repo.get_messages(sessions[0].id)
        assert [(m.sender, m.text) for m in messages] == [("user", "hello")]

    def test_embedding_failure_is_fatal(self, chat_repo, index, llm, user_id):
        service = build_service(chat_repo, index, llm, embeddings=FakeEmbeddingClient(fail=True))

        with pytest.raises(EmbeddingError):
            turn(service, "hello", "session-1", user_id)
        assert llm.calls == []


class TestPromptMessages:
    """Tests for build_prompt_messages."""

    def test_without_context(self):
        messages = build_prompt_messages("hi", [], "")

        assert len(messages) == 2
        assert "SkillMart" in messages[0]["content"]
        assert "/listings/{id}" in messages[0]["content"]
        assert "CONTEXT INFORMATION" not in messages[0]["content"]

    def test_bot_turns_map_to_assistant(self):
        history = [ChatMessage(sender="bot", text="Welcome!")]
        messages = build_prompt_messages("hi", history, "")

        assert messages[1] == {"role": "assistant", "content": "Welcome!"}


class TestSessionManagement:
    """Tests for listing, renaming and deleting sessions."""

    def test_list_requires_caller(self, chat_repo, index, llm):
        service = build_service(chat_repo, index, llm)
        with pytest.raises(AuthenticationError):
            service.list_sessions(None)

    def test_placeholder_sessions_have_no_stored_messages(self, chat_repo, index, llm, user_id):
        service = build_service(chat_repo, index, llm)
        assert service.get_messages("session-42", user_id) == []

    def test_rename(self, chat_repo, index, llm, user_id):
        service = build_service(chat_repo, index, llm)
        result = turn(service, "hi", "session-1", user_id)

        renamed = service.rename_session(result.session_id, "  Music help ", user_id)
        assert renamed.name == "Music help"

        with pytest.raises(ValueError):
            service.rename_session(result.session_id, "   ", user_id)

    def test_delete(self, chat_repo, index, llm, user_id):
        service = build_service(chat_repo, index, llm)
        result = turn(service, "hi", "session-1", user_id)

        service.delete_session(result.session_id, user_id)

        assert chat_repo.list_sessions(user_id) == []

    def test_delete_placeholder_is_noop(self, chat_repo, index, llm, user_id):
        service = build_service(chat_repo, index, llm)
        service.delete_session("session-9", user_id)
