"""
Tests for context gathering across the three retrieval branches.
"""
import asyncio

import pytest

from conftest import FakeListingRepository, FakeVectorIndex, make_listing
from src.application.services.context_assembler import ContextAssembler
from src.domain.models import ChatMessage

ID_A = "aaaa1111-0000-4000-8000-000000000001"
ID_B = "bbbb2222-0000-4000-8000-000000000002"
ID_C = "cccc3333-0000-4000-8000-000000000003"


@pytest.fixture
def listings() -> FakeListingRepository:
    return FakeListingRepository([
        make_listing(ID_A, title="Guitar Lessons", category="Music"),
        make_listing(ID_B, title="Portrait Photography", category="Photography & Video"),
        make_listing(ID_C, title="Home Cooking", category="Lifestyle"),
    ])


def assembler(listings, index, **kwargs) -> ContextAssembler:
    params = dict(
        similarity_threshold=0.6,
        match_max_results=5,
        similar_max_results=3,
        category_examples_limit=3,
        history_scan_depth=3,
    )
    params.update(kwargs)
    return ContextAssembler(listings, index, **params)


def gather(ctx: ContextAssembler, message, history=()):
    return asyncio.run(ctx.gather(message, list(history), [0.1, 0.2]))


class TestRelevantListings:
    """Tests for the query-embedding branch."""

    def test_matches_are_fetched_in_similarity_order(self, listings):
        index = FakeVectorIndex(matches=[ID_C, ID_A])
        bundle = gather(assembler(listings, index), "hello")

        assert [l.id for l in bundle.relevant_listings] == [ID_C, ID_A]
        assert index.match_calls == [([0.1, 0.2], 0.6, 5)]

    def test_deleted_listing_is_silently_dropped(self, listings):
        index = FakeVectorIndex(matches=["dddd", ID_A])
        bundle = gather(assembler(listings, index), "hello")

        assert [l.id for l in bundle.relevant_listings] == [ID_A]

    def test_similarity_failure_degrades(self, listings):
        index = FakeVectorIndex(fail_match=True, similar=[ID_B])
        bundle = gather(assembler(listings, index), f"like /listings/{ID_A}")

        assert bundle.relevant_listings == []
        assert [l.id for l in bundle.similar_listings] == [ID_B]


class TestSimilarListings:
    """Tests for the explicit-reference branch."""

    def test_no_reference_skips_lookup(self, listings):
        index = FakeVectorIndex(similar=[ID_B])
        bundle = gather(assembler(listings, index), "anything good?")

        assert bundle.similar_listings == []
        assert index.similar_calls == []

    def test_uses_most_recent_reference(self, listings):
        index = FakeVectorIndex(similar=[ID_C])
        message = f"Compare /listings/{ID_A} and /listings/{ID_B}"
        bundle = gather(assembler(listings, index), message)

        assert index.similar_calls == [(ID_B, 0.6, 3)]
        assert [l.id for l in bundle.similar_listings] == [ID_C]

    def test_reference_in_trailing_history(self, listings):
        index = FakeVectorIndex(similar=[ID_C])
        history = [
            ChatMessage(sender="user", text=f"old /listings/{ID_C}"),
            ChatMessage(sender="bot", text=f"Try /listings/{ID_A}"),
            ChatMessage(sender="user", text="hmm"),
            ChatMessage(sender="bot", text="anything else?"),
        ]
        gather(assembler(listings, index), "show me more like that", history)

        assert index.similar_calls[0][0] == ID_A

    def test_history_beyond_scan_depth_is_ignored(self, listings):
        index = FakeVectorIndex(similar=[ID_C])
        history = [
            ChatMessage(sender="bot", text=f"Try /listings/{ID_A}"),
            ChatMessage(sender="user", text="one"),
            ChatMessage(sender="bot", text="two"),
            ChatMessage(sender="user", text="three"),
        ]
        bundle = gather(assembler(listings, index), "more?", history)

        assert index.similar_calls == []
        assert bundle.similar_listings == []

    def test_similar_failure_degrades(self, listings):
        index = FakeVectorIndex(matches=[ID_A], fail_similar=True)
        bundle = gather(assembler(listings, index), f"more like /listings/{ID_A}")

        assert bundle.similar_listings == []
        assert [l.id for l in bundle.relevant_listings] == [ID_A]


class TestCategoryExamples:
    """Tests for the category-mention branch."""

    def test_examples_per_distinct_keyword(self, listings):
        index = FakeVectorIndex()
        history = [ChatMessage(sender="user", text="I also like MUSIC")]
        bundle = gather(assembler(listings, index), "photography or music?", history)

        categories = [g.category for g in bundle.category_examples]
        assert categories == ["photography", "music"]
        assert [l.id for l in bundle.category_examples[0].examples] == [ID_B]
        assert [l.id for l in bundle.category_examples[1].examples] == [ID_A]

    def test_keyword_without_listings_keeps_empty_group(self, listings):
        bundle = gather(assembler(listings, FakeVectorIndex()), "any fitness coaches?")

        assert len(bundle.category_examples) == 1
        assert bundle.category_examples[0].category == "fitness"
        assert bundle.category_examples[0].examples == []

    def test_single_category_failure_only_empties_that_group(self):
        listings = FakeListingRepository(
            [make_listing(ID_A, title="Guitar Lessons", category="Music")],
            fail_categories={"cooking"},
        )
        bundle = gather(assembler(listings, FakeVectorIndex()), "music and cooking")

        by_category = {g.category: g.examples for g in bundle.category_examples}
        assert [l.id for l in by_category["music"]] == [ID_A]
        assert by_category["cooking"] == []

    def test_nothing_mentioned(self, listings):
        bundle = gather(assembler(listings, FakeVectorIndex()), "hello there")

        assert bundle.is_empty()
        assert listings.category_calls == []


class TestLimits:
    """Tests for result caps passed to the assembler."""

    def test_unset_limits_fall_back_to_settings(self, listings):
        ctx = ContextAssembler(listings, FakeVectorIndex())

        assert ctx.similarity_threshold == 0.6
        assert ctx.match_max_results == 5
        assert ctx.similar_max_results == 3
        assert ctx.category_examples_limit == 3
        assert ctx.history_scan_depth == 3

    def test_explicit_zero_limits_are_kept(self, listings):
        index = FakeVectorIndex(matches=[ID_A], similar=[ID_B])
        ctx = assembler(
            listings, index,
            match_max_results=0, similar_max_results=0, category_examples_limit=0,
        )

        bundle = gather(ctx, f"music like /listings/{ID_C}")

        assert (ctx.match_max_results, ctx.similar_max_results, ctx.category_examples_limit) == (0, 0, 0)
        assert index.match_calls[0][2] == 0
        assert index.similar_calls[0][2] == 0
        assert bundle.relevant_listings == []
        assert bundle.similar_listings == []
        assert [g.examples for g in bundle.category_examples] == [[]]
