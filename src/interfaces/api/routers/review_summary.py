"""Review summary router."""

from fastapi import APIRouter, Depends

from src.application.services.review_summary_service import ReviewSummaryService
from src.config.logging_config import get_logger
from src.interfaces.api.dependencies import get_review_summary_service
from src.interfaces.api.errors import REVIEW_SUMMARY_FAILURE_MESSAGE, error_response
from src.interfaces.api.schemas.common import ErrorResponse
from src.interfaces.api.schemas.review import ReviewSummaryRequest, ReviewSummaryResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["reviews"])


@router.post(
    "/review-summary",
    response_model=ReviewSummaryResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def review_summary(
    request: ReviewSummaryRequest,
    summary_service: ReviewSummaryService = Depends(get_review_summary_service),
):
    """
    Summarize a listing's reviews.

    Returns:
        {"summary", "pros", "cons"} on success, {"error"} otherwise
    """
    try:
        summary = summary_service.summarize(request.listing_id)
    except Exception as e:
        logger.error(f"Review summary error for listing {request.listing_id}: {e}")
        return error_response(e, REVIEW_SUMMARY_FAILURE_MESSAGE)
    return ReviewSummaryResponse.model_validate(summary)
