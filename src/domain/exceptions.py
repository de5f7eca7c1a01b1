"""Domain exceptions raised by repositories, clients and services."""


class MarketplaceError(Exception):
    """Base class for all application errors."""


class AuthenticationError(MarketplaceError):
    """No authenticated caller where one is required."""


class PermissionDeniedError(MarketplaceError):
    """Caller is authenticated but does not own the resource."""


class StoreError(MarketplaceError):
    """A relational store or vector index call failed."""


class EmbeddingError(MarketplaceError):
    """The embedding model could not embed the input text."""


class CompletionError(MarketplaceError):
    """The language-model completion call failed."""


class NotFoundError(MarketplaceError):
    """Requested record does not exist."""


class ListingNotFoundError(NotFoundError):
    def __init__(self, listing_id: str):
        super().__init__(f"Listing not found: {listing_id}")
        self.listing_id = listing_id


class SessionNotFoundError(NotFoundError):
    def __init__(self, session_id: str):
        super().__init__(f"Chat session not found: {session_id}")
        self.session_id = session_id


class ReviewNotFoundError(NotFoundError):
    def __init__(self, review_id: str):
        super().__init__(f"Review not found: {review_id}")
        self.review_id = review_id


class ConflictError(MarketplaceError):
    """The write would duplicate an existing record."""
