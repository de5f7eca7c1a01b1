"""FastAPI dependencies for dependency injection."""

from typing import Optional

from fastapi import Depends, Header

from src.config.settings import settings
from src.config.logging_config import get_logger
from src.infrastructure.database.connection import SessionLocal, init_db
from src.infrastructure.database.repositories import (
    ChatRepository,
    ListingRepository,
    ListingSummaryRepository,
    ProfileRepository,
    ReviewRepository,
    SavedListingRepository,
)
from src.infrastructure.embeddings.embedding_client import EmbeddingClient
from src.infrastructure.llm.groq_client import get_groq_client
from src.infrastructure.vector.listing_index import ListingVectorIndex
from src.application.services.chat_service import ChatService
from src.application.services.context_assembler import ContextAssembler
from src.application.services.listing_search_service import ListingSearchService
from src.application.services.listing_service import ListingService
from src.application.services.review_service import ReviewService
from src.application.services.review_summary_service import ReviewSummaryService
from src.application.services.saved_listing_service import SavedListingService

logger = get_logger(__name__)


# Global service instances (initialized in lifespan)
_profile_repository: ProfileRepository | None = None
_listing_search_service: ListingSearchService | None = None
_listing_service: ListingService | None = None
_chat_service: ChatService | None = None
_review_service: ReviewService | None = None
_saved_listing_service: SavedListingService | None = None
_review_summary_service: ReviewSummaryService | None = None


def init_services():
    """Initialize global service instances."""
    global _profile_repository, _listing_search_service, _listing_service, _chat_service
    global _review_service, _saved_listing_service, _review_summary_service

    init_db()

    listings = ListingRepository(SessionLocal)
    _profile_repository = ProfileRepository(SessionLocal)
    chats = ChatRepository(SessionLocal)
    reviews = ReviewRepository(SessionLocal)
    summaries = ListingSummaryRepository(SessionLocal)

    embeddings = EmbeddingClient()
    vector_index = ListingVectorIndex()
    review_index = ListingVectorIndex(
        client=vector_index.client, collection_name=settings.review_collection_name
    )
    llm = get_groq_client()

    _listing_search_service = ListingSearchService(listings, _profile_repository)
    _listing_service = ListingService(listings, embeddings, vector_index)
    _chat_service = ChatService(
        chats=chats,
        embeddings=embeddings,
        context_assembler=ContextAssembler(listings, vector_index),
        llm=llm,
    )
    _review_service = ReviewService(reviews, listings, summaries, embeddings, review_index)
    _saved_listing_service = SavedListingService(SavedListingRepository(SessionLocal))
    _review_summary_service = ReviewSummaryService(
        reviews=reviews,
        summaries=summaries,
        embeddings=embeddings,
        review_index=review_index,
        llm=llm,
    )


def get_profile_repository() -> ProfileRepository:
    if _profile_repository is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _profile_repository


def get_listing_search_service() -> ListingSearchService:
    """
    Get listing search service instance.

    Returns:
        ListingSearchService instance
    """
    if _listing_search_service is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _listing_search_service


def get_listing_service() -> ListingService:
    if _listing_service is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _listing_service


def get_chat_service() -> ChatService:
    """
    Get chat service instance.

    Returns:
        ChatService instance
    """
    if _chat_service is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _chat_service


def get_review_service() -> ReviewService:
    if _review_service is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _review_service


def get_saved_listing_service() -> SavedListingService:
    if _saved_listing_service is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _saved_listing_service


def get_review_summary_service() -> ReviewSummaryService:
    """
    Get review summary service instance.

    Returns:
        ReviewSummaryService instance
    """
    if _review_summary_service is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    return _review_summary_service


def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None),
    profiles: ProfileRepository = Depends(get_profile_repository),
) -> Optional[str]:
    """
    Resolve the authenticated caller.

    The auth gateway in front of the API forwards the verified user id in the
    X-User-Id header. Ids without a profile are treated as anonymous.
    """
    if not x_user_id:
        return None
    try:
        profile = profiles.get(x_user_id)
    except Exception as e:
        logger.error(f"Failed to resolve caller {x_user_id}: {e}")
        return None
    if profile is None:
        logger.warning(f"Unknown caller id: {x_user_id}")
        return None
    return profile.id
