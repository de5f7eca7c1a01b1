"""Repositories over the relational store.

Each method opens its own short-lived session from the injected factory and
returns pydantic domain records, so callers never see ORM rows and calls can
run independently from worker threads.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from src.domain import models as domain
from src.domain.catalog import effective_listing_type
from src.domain.exceptions import (
    ListingNotFoundError,
    ReviewNotFoundError,
    SessionNotFoundError,
    StoreError,
)
from src.infrastructure.database.models import (
    ChatMessage,
    ChatSession,
    Listing,
    ListingSummary,
    Profile,
    Review,
    SavedListing,
)

SEARCHABLE_LISTING_FIELDS = ("title", "description", "category")
MUTABLE_LISTING_FIELDS = ("title", "description", "category", "listing_type", "price", "image_url")
MUTABLE_REVIEW_FIELDS = ("rating", "comment")


def _fuzzy(term: str) -> str:
    return f"%{term}%"


class _Repository:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"{type(self).__name__}: {e}") from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


class ListingRepository(_Repository):
    """Reads and writes listings."""

    @staticmethod
    def _apply_filters(query, listing_type: Optional[str], category: Optional[str]):
        listing_type = effective_listing_type(listing_type)
        if listing_type:
            query = query.filter(Listing.listing_type == listing_type)
        if category:
            query = query.filter(Listing.category == category)
        return query

    def find_by_field_contains(
        self,
        field: str,
        term: str,
        listing_type: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[domain.Listing]:
        """Listings whose `field` contains `term`, case-insensitively."""
        if field not in SEARCHABLE_LISTING_FIELDS:
            raise ValueError(f"Field is not searchable: {field}")
        with self._session() as db:
            query = db.query(Listing).filter(getattr(Listing, field).ilike(_fuzzy(term)))
            query = self._apply_filters(query, listing_type, category)
            return [domain.Listing.model_validate(row) for row in query.all()]

    def find_by_owner_ids(
        self,
        user_ids: Sequence[str],
        listing_type: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[domain.Listing]:
        if not user_ids:
            return []
        with self._session() as db:
            query = db.query(Listing).filter(Listing.user_id.in_(list(user_ids)))
            query = self._apply_filters(query, listing_type, category)
            return [domain.Listing.model_validate(row) for row in query.all()]

    def get_by_ids(self, listing_ids: Sequence[str]) -> List[domain.Listing]:
        """Fetch listings by id; ids that no longer exist are skipped."""
        if not listing_ids:
            return []
        with self._session() as db:
            rows = db.query(Listing).filter(Listing.id.in_(list(listing_ids))).all()
            by_id = {row.id: domain.Listing.model_validate(row) for row in rows}
        # Keep the caller's (similarity) order
        return [by_id[i] for i in listing_ids if i in by_id]

    def find_by_category_contains(self, keyword: str, limit: int) -> List[domain.Listing]:
        with self._session() as db:
            rows = (
                db.query(Listing)
                .filter(Listing.category.ilike(_fuzzy(keyword)))
                .limit(limit)
                .all()
            )
            return [domain.Listing.model_validate(row) for row in rows]

    def list_listings(
        self,
        listing_type: Optional[str] = None,
        category: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[domain.Listing]:
        """All listings matching the filters, newest first."""
        with self._session() as db:
            query = self._apply_filters(db.query(Listing), listing_type, category)
            if user_id:
                query = query.filter(Listing.user_id == user_id)
            rows = query.order_by(Listing.created_at.desc()).all()
            return [domain.Listing.model_validate(row) for row in rows]

    def get(self, listing_id: str) -> domain.Listing:
        with self._session() as db:
            row = db.get(Listing, listing_id)
            if row is None:
                raise ListingNotFoundError(listing_id)
            return domain.Listing.model_validate(row)

    def create(self, user_id: str, **fields) -> domain.Listing:
        with self._session() as db:
            row = Listing(user_id=user_id, **{k: v for k, v in fields.items() if k in MUTABLE_LISTING_FIELDS})
            db.add(row)
            db.flush()
            db.refresh(row)
            return domain.Listing.model_validate(row)

    def update(self, listing_id: str, **fields) -> domain.Listing:
        with self._session() as db:
            row = db.get(Listing, listing_id)
            if row is None:
                raise ListingNotFoundError(listing_id)
            for key, value in fields.items():
                if key in MUTABLE_LISTING_FIELDS:
                    setattr(row, key, value)
            row.updated_at = datetime.now(timezone.utc)
            db.flush()
            db.refresh(row)
            return domain.Listing.model_validate(row)

    def delete(self, listing_id: str) -> None:
        with self._session() as db:
            row = db.get(Listing, listing_id)
            if row is None:
                raise ListingNotFoundError(listing_id)
            db.delete(row)


class ProfileRepository(_Repository):
    """Reads user profiles."""

    def find_ids_by_username_contains(self, term: str) -> List[str]:
        with self._session() as db:
            rows = db.query(Profile.id).filter(Profile.username.ilike(_fuzzy(term))).all()
            return [row.id for row in rows]

    def search(self, term: str) -> List[domain.Profile]:
        """Profiles whose username or full name contains `term`."""
        pattern = _fuzzy(term)
        with self._session() as db:
            rows = (
                db.query(Profile)
                .filter(or_(Profile.username.ilike(pattern), Profile.full_name.ilike(pattern)))
                .all()
            )
            return [domain.Profile.model_validate(row) for row in rows]

    def get(self, user_id: str) -> Optional[domain.Profile]:
        with self._session() as db:
            row = db.get(Profile, user_id)
            return domain.Profile.model_validate(row) if row else None


class ChatRepository(_Repository):
    """Chat sessions and their messages."""

    def create_session(self, user_id: str, name: str) -> domain.ChatSessionRecord:
        with self._session() as db:
            row = ChatSession(user_id=user_id, name=name)
            db.add(row)
            db.flush()
            db.refresh(row)
            return domain.ChatSessionRecord.model_validate(row)

    def get_session(self, session_id: str) -> domain.ChatSessionRecord:
        with self._session() as db:
            row = db.get(ChatSession, session_id)
            if row is None:
                raise SessionNotFoundError(session_id)
            return domain.ChatSessionRecord.model_validate(row)

    def list_sessions(self, user_id: str) -> List[domain.ChatSessionRecord]:
        """Sessions of a user, most recently active first."""
        with self._session() as db:
            rows = (
                db.query(ChatSession)
                .filter(ChatSession.user_id == user_id)
                .order_by(ChatSession.updated_at.desc())
                .all()
            )
            return [domain.ChatSessionRecord.model_validate(row) for row in rows]

    def add_message(self, session_id: str, sender: str, text: str) -> domain.ChatMessage:
        """Append a message and mark the session as recently active."""
        with self._session() as db:
            session = db.get(ChatSession, session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            row = ChatMessage(session_id=session_id, sender=sender, text=text)
            db.add(row)
            session.updated_at = datetime.now(timezone.utc)
            db.flush()
            db.refresh(row)
            return domain.ChatMessage.model_validate(row)

    def get_messages(self, session_id: str) -> List[domain.ChatMessage]:
        with self._session() as db:
            rows = (
                db.query(ChatMessage)
                .filter(ChatMessage.session_id == session_id)
                .order_by(ChatMessage.created_at, ChatMessage.id)
                .all()
            )
            return [domain.ChatMessage.model_validate(row) for row in rows]

    def rename_session(self, session_id: str, name: str) -> domain.ChatSessionRecord:
        with self._session() as db:
            row = db.get(ChatSession, session_id)
            if row is None:
                raise SessionNotFoundError(session_id)
            row.name = name
            db.flush()
            db.refresh(row)
            return domain.ChatSessionRecord.model_validate(row)

    def delete_session(self, session_id: str) -> None:
        with self._session() as db:
            row = db.get(ChatSession, session_id)
            if row is None:
                raise SessionNotFoundError(session_id)
            db.delete(row)


class ReviewRepository(_Repository):
    """Listing reviews and their ratings."""

    @staticmethod
    def _record(row: Review) -> domain.Review:
        review = domain.Review.model_validate(row)
        if row.author is not None:
            review.username = row.author.username
        return review

    def list_for_listing(self, listing_id: str) -> List[domain.Review]:
        """Reviews of a listing, newest first."""
        with self._session() as db:
            rows = (
                db.query(Review)
                .filter(Review.listing_id == listing_id)
                .order_by(Review.created_at.desc())
                .all()
            )
            return [self._record(row) for row in rows]

    def ratings(self, listing_id: str) -> List[int]:
        with self._session() as db:
            rows = db.query(Review.rating).filter(Review.listing_id == listing_id).all()
            return [row.rating for row in rows]

    def get(self, review_id: str) -> domain.Review:
        with self._session() as db:
            row = db.get(Review, review_id)
            if row is None:
                raise ReviewNotFoundError(review_id)
            return self._record(row)

    def find_by_author(self, listing_id: str, user_id: str) -> Optional[domain.Review]:
        with self._session() as db:
            row = (
                db.query(Review)
                .filter(Review.listing_id == listing_id, Review.user_id == user_id)
                .one_or_none()
            )
            return self._record(row) if row else None

    def create(self, listing_id: str, user_id: str, rating: int, comment: Optional[str] = None) -> domain.Review:
        with self._session() as db:
            row = Review(listing_id=listing_id, user_id=user_id, rating=rating, comment=comment)
            db.add(row)
            db.flush()
            db.refresh(row)
            return self._record(row)

    def update(self, review_id: str, **fields) -> domain.Review:
        with self._session() as db:
            row = db.get(Review, review_id)
            if row is None:
                raise ReviewNotFoundError(review_id)
            for key, value in fields.items():
                if key in MUTABLE_REVIEW_FIELDS:
                    setattr(row, key, value)
            row.updated_at = datetime.now(timezone.utc)
            db.flush()
            db.refresh(row)
            return self._record(row)

    def delete(self, review_id: str) -> None:
        with self._session() as db:
            row = db.get(Review, review_id)
            if row is None:
                raise ReviewNotFoundError(review_id)
            db.delete(row)


class SavedListingRepository(_Repository):
    """Listings bookmarked by users."""

    def list_for_user(
        self,
        user_id: str,
        listing_type: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[domain.SavedListing]:
        """Saved listings of a user, most recently saved first."""
        with self._session() as db:
            query = (
                db.query(SavedListing)
                .join(Listing, SavedListing.listing_id == Listing.id)
                .filter(SavedListing.user_id == user_id)
            )
            query = ListingRepository._apply_filters(query, listing_type, category)
            rows = query.order_by(SavedListing.saved_at.desc()).all()
            return [domain.SavedListing.model_validate(row) for row in rows]

    def is_saved(self, user_id: str, listing_id: str) -> bool:
        with self._session() as db:
            row = (
                db.query(SavedListing.id)
                .filter(SavedListing.user_id == user_id, SavedListing.listing_id == listing_id)
                .first()
            )
            return row is not None

    def save(self, user_id: str, listing_id: str) -> domain.SavedListing:
        with self._session() as db:
            if db.get(Listing, listing_id) is None:
                raise ListingNotFoundError(listing_id)
            row = SavedListing(user_id=user_id, listing_id=listing_id)
            db.add(row)
            db.flush()
            db.refresh(row)
            return domain.SavedListing.model_validate(row)

    def unsave(self, user_id: str, listing_id: str) -> None:
        with self._session() as db:
            (
                db.query(SavedListing)
                .filter(SavedListing.user_id == user_id, SavedListing.listing_id == listing_id)
                .delete(synchronize_session=False)
            )


class ListingSummaryRepository(_Repository):
    """Cached review summaries, one row per listing."""

    def get(self, listing_id: str) -> Optional[domain.CachedReviewSummary]:
        with self._session() as db:
            row = db.get(ListingSummary, listing_id)
            return domain.CachedReviewSummary.model_validate(row) if row else None

    def store(self, listing_id: str, summary: domain.ReviewSummary) -> domain.CachedReviewSummary:
        """Insert or replace the summary and mark it current."""
        with self._session() as db:
            row = db.get(ListingSummary, listing_id)
            if row is None:
                row = ListingSummary(listing_id=listing_id)
                db.add(row)
            row.summary = summary.summary
            row.pros = list(summary.pros)
            row.cons = list(summary.cons)
            row.needs_update = False
            row.updated_at = datetime.now(timezone.utc)
            db.flush()
            db.refresh(row)
            return domain.CachedReviewSummary.model_validate(row)

    def mark_stale(self, listing_id: str) -> None:
        with self._session() as db:
            row = db.get(ListingSummary, listing_id)
            if row is None:
                if db.get(Listing, listing_id) is None:
                    return
                row = ListingSummary(listing_id=listing_id, pros=[], cons=[])
                db.add(row)
            row.needs_update = True
            row.updated_at = datetime.now(timezone.utc)
