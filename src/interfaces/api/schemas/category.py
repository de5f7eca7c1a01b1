"""Category schemas."""

from typing import List
from pydantic import BaseModel


class CatalogResponse(BaseModel):
    """Fixed categories and listing types offered by the marketplace."""
    categories: List[str]
    listing_types: List[str]
