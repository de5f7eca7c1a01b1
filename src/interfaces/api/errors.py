"""Mapping of domain errors to HTTP errors."""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.config.logging_config import get_logger
from src.domain.exceptions import (
    AuthenticationError,
    ConflictError,
    MarketplaceError,
    NotFoundError,
    PermissionDeniedError,
)

logger = get_logger(__name__)

CHAT_FAILURE_MESSAGE = "Failed to generate response"
REVIEW_SUMMARY_FAILURE_MESSAGE = "Failed to generate review summary"

# Routes whose clients expect {"error": ...} for every failure, including bad bodies
ERROR_BODY_ROUTES = {
    "/api/chat": CHAT_FAILURE_MESSAGE,
    "/api/review-summary": REVIEW_SUMMARY_FAILURE_MESSAGE,
}


def status_for(error: Exception) -> int:
    if isinstance(error, AuthenticationError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(error, PermissionDeniedError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, ConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(error, ValueError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def to_http_exception(error: Exception) -> HTTPException:
    """Translate a domain error; anything else becomes a generic 500."""
    if isinstance(error, (MarketplaceError, ValueError)):
        code = status_for(error)
        detail = str(error) if code != status.HTTP_500_INTERNAL_SERVER_ERROR else "Internal server error"
        return HTTPException(status_code=code, detail=detail)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


def error_response(error: Exception, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_for(error), content={"error": message})


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers for the FastAPI application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        message = ERROR_BODY_ROUTES.get(request.url.path)
        if message is None:
            return await request_validation_exception_handler(request, exc)
        logger.warning(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})
