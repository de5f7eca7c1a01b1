"""Shared fixtures: in-memory database, seeded rows and collaborator fakes."""

import os

# Settings are read at import time
os.environ.setdefault("GROQ_API_KEY", "test-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest
from sqlalchemy.orm import sessionmaker

from src.domain.exceptions import CompletionError, EmbeddingError, StoreError
from src.domain.models import Listing as ListingRecord
from src.domain.models import SimilarityMatch
from src.infrastructure.database.connection import Base, build_engine
from src.infrastructure.database import models
from src.infrastructure.database.repositories import (
    ChatRepository,
    ListingSummaryRepository,
    ListingRepository,
    ProfileRepository,
    ReviewRepository,
    SavedListingRepository,
)

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0)


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def listing_repo(session_factory) -> ListingRepository:
    return ListingRepository(session_factory)


@pytest.fixture
def profile_repo(session_factory) -> ProfileRepository:
    return ProfileRepository(session_factory)


@pytest.fixture
def chat_repo(session_factory) -> ChatRepository:
    return ChatRepository(session_factory)


@pytest.fixture
def review_repo(session_factory) -> ReviewRepository:
    return ReviewRepository(session_factory)


@pytest.fixture
def saved_repo(session_factory) -> SavedListingRepository:
    return SavedListingRepository(session_factory)


@pytest.fixture
def summary_repo(session_factory) -> ListingSummaryRepository:
    return ListingSummaryRepository(session_factory)


def add_profile(session_factory, username: str, full_name: Optional[str] = None, profile_id: Optional[str] = None) -> str:
    with session_factory() as db:
        row = models.Profile(username=username, full_name=full_name)
        if profile_id:
            row.id = profile_id
        db.add(row)
        db.commit()
        return row.id


def add_listing(
    session_factory,
    user_id: str,
    title: str,
    description: str = "",
    category: str = "Music",
    listing_type: str = "Providing Skills",
    price: Optional[float] = None,
    age_days: int = 0,
    listing_id: Optional[str] = None,
) -> str:
    """Insert a listing created `age_days` before BASE_TIME."""
    created = BASE_TIME - timedelta(days=age_days)
    with session_factory() as db:
        row = models.Listing(
            user_id=user_id,
            title=title,
            description=description,
            category=category,
            listing_type=listing_type,
            price=price,
            created_at=created,
            updated_at=created,
        )
        if listing_id:
            row.id = listing_id
        db.add(row)
        db.commit()
        return row.id


def add_review(
    session_factory,
    listing_id: str,
    user_id: str,
    rating: int,
    comment: Optional[str] = None,
    age_days: int = 0,
) -> str:
    created = BASE_TIME - timedelta(days=age_days)
    with session_factory() as db:
        row = models.Review(
            listing_id=listing_id,
            user_id=user_id,
            rating=rating,
            comment=comment,
            created_at=created,
            updated_at=created,
        )
        db.add(row)
        db.commit()
        return row.id


def make_listing(listing_id: str, title: str = "Listing", category: str = "Music", **fields) -> ListingRecord:
    return ListingRecord(
        id=listing_id,
        title=title,
        description=fields.pop("description", f"About {title}"),
        category=category,
        listing_type=fields.pop("listing_type", "Providing Skills"),
        price=fields.pop("price", 20),
        user_id=fields.pop("user_id", "owner-1"),
        created_at=fields.pop("created_at", datetime(2025, 1, 1, tzinfo=timezone.utc)),
        **fields,
    )


class FakeListingRepository:
    """In-memory stand-in for the listing lookups used while gathering context."""

    def __init__(self, listings: List[ListingRecord] = None, fail_categories: set = None):
        self.listings = {l.id: l for l in (listings or [])}
        self.fail_categories = fail_categories or set()
        self.category_calls = []

    def get_by_ids(self, listing_ids):
        return [self.listings[i] for i in listing_ids if i in self.listings]

    def find_by_category_contains(self, keyword, limit):
        self.category_calls.append(keyword)
        if keyword in self.fail_categories:
            raise StoreError(f"category lookup failed for {keyword}")
        matches = [l for l in self.listings.values() if keyword.lower() in l.category.lower()]
        return matches[:limit]


class FakeVectorIndex:
    """Vector index returning canned matches and recording calls."""

    def __init__(self, matches=None, similar=None, reviews=None, fail_match=False, fail_similar=False):
        self.matches = matches or []
        self.similar = similar or []
        self.reviews = reviews or []
        self.fail_match = fail_match
        self.fail_similar = fail_similar
        self.match_calls = []
        self.similar_calls = []
        self.upserts = {}
        self.metadata = {}
        self.review_calls = []
        self.removed = []

    def match_listings(self, query_embedding, similarity_threshold, max_results):
        self.match_calls.append((list(query_embedding), similarity_threshold, max_results))
        if self.fail_match:
            raise StoreError("match_listings unavailable")
        return [SimilarityMatch(id=i, similarity=0.9) for i in self.matches][:max_results]

    def similar_listings(self, listing_id, similarity_threshold, max_results):
        self.similar_calls.append((listing_id, similarity_threshold, max_results))
        if self.fail_similar:
            raise StoreError("similar_listings unavailable")
        return [SimilarityMatch(id=i, similarity=0.8) for i in self.similar][:max_results]

    def match_reviews(self, query_embedding, listing_id, similarity_threshold, max_results):
        self.review_calls.append((list(query_embedding), listing_id, similarity_threshold, max_results))
        return [SimilarityMatch(id=i, similarity=0.7) for i in self.reviews][:max_results]

    def upsert(self, item_id, embedding, metadata=None):
        self.upserts[item_id] = list(embedding)
        if metadata:
            self.metadata[item_id] = dict(metadata)

    def remove(self, item_id):
        self.removed.append(item_id)


class FakeEmbeddingClient:
    def __init__(self, vector=None, fail=False):
        self.vector = vector or [0.1, 0.2, 0.3]
        self.fail = fail
        self.texts = []

    def embed(self, text):
        self.texts.append(text)
        if self.fail:
            raise EmbeddingError("embedding model offline")
        return list(self.vector)

    def embed_listing(self, listing):
        return self.embed(f"{listing.title}\n{listing.description}\n{listing.category}")


class FakeLLM:
    def __init__(self, reply="Here are some options.", fail=False):
        self.reply = reply
        self.fail = fail
        self.calls = []

    def chat_completion(self, messages, temperature=0, max_tokens=None, **kwargs):
        self.calls.append({"messages": messages, "temperature": temperature, "max_tokens": max_tokens})
        if self.fail:
            raise CompletionError("completion service unavailable")
        return self.reply

    def extract_json(self, system_prompt, user_query, temperature=0, max_tokens=None):
        self.calls.append({
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_query},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.fail:
            raise CompletionError("completion service unavailable")
        return self.reply
