"""
Tests for listing catalogue operations and embedding indexing jobs.
"""
import pytest

from conftest import FakeEmbeddingClient, FakeVectorIndex, add_listing, add_profile
from src.application.services.listing_service import ListingService
from src.domain.exceptions import AuthenticationError, PermissionDeniedError, StoreError


@pytest.fixture
def owner(session_factory) -> str:
    return add_profile(session_factory, "frank")


@pytest.fixture
def index() -> FakeVectorIndex:
    return FakeVectorIndex()


@pytest.fixture
def service(listing_repo, index) -> ListingService:
    return ListingService(listing_repo, FakeEmbeddingClient(vector=[0.5, 0.5]), index)


class TestListingService:
    """Tests for ListingService."""

    def test_create_requires_caller(self, service):
        with pytest.raises(AuthenticationError):
            service.create_listing(None, title="x", category="Music", listing_type="Providing Skills")

    def test_only_owner_can_update_or_delete(self, service, session_factory, owner):
        other = add_profile(session_factory, "grace")
        listing_id = add_listing(session_factory, owner, "Knitting circle")

        with pytest.raises(PermissionDeniedError):
            service.update_listing(listing_id, other, title="Mine now")
        with pytest.raises(PermissionDeniedError):
            service.delete_listing(listing_id, other)

        assert service.update_listing(listing_id, owner, price=10).price == 10

    def test_index_listing_upserts_embedding(self, service, index, session_factory, owner):
        listing_id = add_listing(session_factory, owner, "Knitting circle", description="Wool and needles")

        assert service.index_listing(listing_id) is True
        assert index.upserts == {listing_id: [0.5, 0.5]}

    def test_index_listing_failure_is_reported_not_raised(self, listing_repo, index, session_factory, owner):
        listing_id = add_listing(session_factory, owner, "Knitting circle")
        service = ListingService(listing_repo, FakeEmbeddingClient(fail=True), index)

        assert service.index_listing(listing_id) is False
        assert index.upserts == {}

    def test_index_missing_listing(self, service):
        assert service.index_listing("gone") is False

    def test_remove_from_index(self, service, index, monkeypatch):
        assert service.remove_from_index("abc") is True
        assert index.removed == ["abc"]

        def broken(listing_id):
            raise StoreError("index offline")

        monkeypatch.setattr(index, "remove", broken)
        assert service.remove_from_index("abc") is False

    def test_reindex_all_counts(self, listing_repo, session_factory, owner):
        add_listing(session_factory, owner, "One")
        add_listing(session_factory, owner, "Two")
        index = FakeVectorIndex()
        service = ListingService(listing_repo, FakeEmbeddingClient(), index)

        assert service.reindex_all() == {"indexed": 2, "failed": 0}
        assert len(index.upserts) == 2
