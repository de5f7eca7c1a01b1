"""Rendering of retrieved listings and reviews into prompt text."""

from typing import List, Optional, Sequence

from src.domain.models import CategoryExamples, ContextBundle, Listing, Review
from src.infrastructure.llm.prompts import (
    CATEGORY_HEADING,
    CONTEXT_FOOTER,
    CONTEXT_HEADER,
    NO_COMMENT_TEXT,
    RELEVANT_LISTINGS_HEADING,
    SIMILAR_LISTINGS_HEADING,
)


def listing_path(listing_id: str) -> str:
    return f"/listings/{listing_id}"


def format_price(price: Optional[float]) -> str:
    """
    Format a listing price.

    Args:
        price: Price in dollars, or None when the owner did not set one

    Returns:
        Formatted price string
    """
    if price is None:
        return "Not specified"
    if float(price).is_integer():
        return f"${int(price):,}"
    return f"${price:,.2f}"


def truncate(text: Optional[str], limit: int) -> str:
    """First `limit` characters followed by an ellipsis."""
    return f"{(text or '')[:limit]}..."


def render_listing_block(listing: Listing, label: str, preview_chars: int = 100) -> str:
    """
    Render one listing as a short structured block.

    Args:
        listing: Listing to render
        label: Block title, e.g. "Listing 1"
        preview_chars: Description characters kept

    Returns:
        Multi-line block
    """
    return "\n".join([
        f"{label}:",
        f"- ID: {listing.id}",
        f"- Title: {listing.title}",
        f"- Category: {listing.category}",
        f"- Type: {listing.listing_type}",
        f"- Price: {format_price(listing.price)}",
        f"- Description: {truncate(listing.description, preview_chars)}",
        f"- URL: {listing_path(listing.id)}",
    ])


def render_listings_section(
    heading: str,
    label_prefix: str,
    listings: List[Listing],
    preview_chars: int = 100,
) -> str:
    if not listings:
        return ""
    blocks = [
        render_listing_block(listing, f"{label_prefix} {i}", preview_chars)
        for i, listing in enumerate(listings, 1)
    ]
    return heading + "\n\n" + "\n\n".join(blocks)


def render_category_section(groups: List[CategoryExamples]) -> str:
    if not groups:
        return ""
    parts = []
    for group in groups:
        examples = ", ".join(
            f"{listing.title} ({listing_path(listing.id)})" for listing in group.examples
        )
        parts.append(
            f"Category: {group.category[:1].upper() + group.category[1:]}\n"
            f"Example listings: {examples}"
        )
    return CATEGORY_HEADING + "\n\n" + "\n\n".join(parts)


def render_context(bundle: ContextBundle, preview_chars: int = 100) -> str:
    """
    Combine the non-empty context sections under one delimited header.

    Returns:
        The context block, or "" when nothing was gathered
    """
    sections = [
        render_listings_section(RELEVANT_LISTINGS_HEADING, "Listing", bundle.relevant_listings, preview_chars),
        render_listings_section(SIMILAR_LISTINGS_HEADING, "Similar Listing", bundle.similar_listings, preview_chars),
        render_category_section(bundle.category_examples),
    ]
    sections = [s for s in sections if s]
    if not sections:
        return ""
    return f"{CONTEXT_HEADER}\n\n" + "\n\n".join(sections) + f"\n\n{CONTEXT_FOOTER}\n\n"


def render_reviews(reviews: Sequence[Review]) -> str:
    """Rating and comment of each review, separated by blank lines."""
    blocks = []
    for review in reviews:
        comment = (review.comment or "").strip() or NO_COMMENT_TEXT
        blocks.append(f"Review rating: {review.rating}/5\nReview content: {comment}")
    return "\n\n".join(blocks)
