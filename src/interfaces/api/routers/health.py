"""Health check router."""

from fastapi import APIRouter

from src.interfaces.api.schemas.common import HealthResponse
from src.interfaces.api.dependencies import (
    get_listing_search_service,
    get_listing_service,
    get_chat_service,
    get_review_service,
    get_review_summary_service,
)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status of the application and services
    """
    try:
        search_service = get_listing_search_service()
        listing_service = get_listing_service()
        chat_service = get_chat_service()
        review_service = get_review_service()
        summary_service = get_review_summary_service()

        return HealthResponse(
            status="healthy",
            search_service=search_service is not None,
            chat_service=chat_service is not None,
            listing_service=listing_service is not None,
            review_service=review_service is not None and summary_service is not None,
            message="All services operational"
        )
    except Exception as e:
        return HealthResponse(
            status="unhealthy",
            search_service=False,
            chat_service=False,
            listing_service=False,
            review_service=False,
            message=str(e)
        )
