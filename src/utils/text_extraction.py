"""Pure text scanning for listing references and category keywords."""

import re
from typing import Iterable, List, Optional, Pattern, Sequence

from src.domain.catalog import CATEGORY_KEYWORDS

# Path segment that links to a listing, e.g. /listings/3f2b-...
LISTING_REFERENCE_PATTERN = re.compile(r"/listings/([0-9a-f-]+)")


def build_keyword_pattern(keywords: Sequence[str]) -> Pattern:
    """Case-insensitive alternation over a fixed vocabulary."""
    return re.compile("(" + "|".join(re.escape(k) for k in keywords) + ")", re.IGNORECASE)


CATEGORY_PATTERN = build_keyword_pattern(CATEGORY_KEYWORDS)


def extract_listing_ids(text: str, pattern: Pattern = LISTING_REFERENCE_PATTERN) -> List[str]:
    """All listing ids referenced in `text`, in order of appearance."""
    if not text:
        return []
    return [match.group(1) for match in pattern.finditer(text)]


def extract_category_keywords(text: str, pattern: Pattern = CATEGORY_PATTERN) -> List[str]:
    """Lowercased category keywords in `text`, in order of appearance (with repeats)."""
    if not text:
        return []
    return [match.group(1).lower() for match in pattern.finditer(text)]


def scan_texts(message: str, history_texts: Iterable[str]) -> List[str]:
    """The message followed by the trailing history texts, in scan order."""
    return [message, *history_texts]


def most_recent_listing_reference(texts: Iterable[str]) -> Optional[str]:
    """Last listing id found when scanning `texts` in order."""
    mentioned = []
    for text in texts:
        mentioned.extend(extract_listing_ids(text))
    return mentioned[-1] if mentioned else None


def mentioned_categories(texts: Iterable[str]) -> List[str]:
    """Distinct category keywords across `texts`, first-seen order."""
    seen = []
    for text in texts:
        for keyword in extract_category_keywords(text):
            if keyword not in seen:
                seen.append(keyword)
    return seen
