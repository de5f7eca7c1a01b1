"""Fixed vocabularies of the marketplace."""

# Sentinel used by browse filters to mean "no listing type restriction"
ALL_TYPES = "All Types"

LISTING_TYPES = (
    "Providing Skills",
    "Looking for Skills",
    "Trading Skills",
)

CATEGORIES = (
    "Business",
    "Finance & Accounting",
    "IT & Software",
    "Office Productivity",
    "Personal Development",
    "Design",
    "Arts",
    "Marketing",
    "Lifestyle",
    "Photography & Video",
    "Health & Fitness",
    "Music",
    "Sports",
    "Teaching & Academics",
)

# Keywords recognised in chat messages, matched case-insensitively against
# the category field of listings
CATEGORY_KEYWORDS = (
    "photography",
    "programming",
    "design",
    "music",
    "writing",
    "language",
    "fitness",
    "cooking",
    "business",
    "technology",
    "education",
    "lifestyle",
)


def effective_listing_type(listing_type):
    """Return the type filter to apply, or None for no restriction."""
    if not listing_type or listing_type == ALL_TYPES:
        return None
    return listing_type
