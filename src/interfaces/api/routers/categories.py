from fastapi import APIRouter

from src.domain.catalog import CATEGORIES, LISTING_TYPES
from src.interfaces.api.schemas.category import CatalogResponse

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=CatalogResponse)
def list_categories():
    return CatalogResponse(categories=list(CATEGORIES), listing_types=list(LISTING_TYPES))
