"""
Listing Embedding Backfill
1. Creates any missing tables
2. Embeds every listing and upserts it into the vector index

Run from the repository root:
    python -m scripts.backfill_listing_embeddings
"""

import sys

from dotenv import load_dotenv

from src.application.services.listing_service import ListingService
from src.config.logging_config import setup_logging, get_logger
from src.infrastructure.database.connection import SessionLocal, init_db
from src.infrastructure.database.repositories import ListingRepository
from src.infrastructure.embeddings.embedding_client import EmbeddingClient
from src.infrastructure.vector.listing_index import ListingVectorIndex

# Load environment variables from .env file
load_dotenv()

setup_logging()
logger = get_logger(__name__)


def main() -> int:
    init_db()

    service = ListingService(
        listings=ListingRepository(SessionLocal),
        embeddings=EmbeddingClient(),
        vector_index=ListingVectorIndex(),
    )

    logger.info("Re-indexing listing embeddings...")
    counts = service.reindex_all()
    logger.info(f"Indexed {counts['indexed']} listings, {counts['failed']} failed")

    return 1 if counts["failed"] else 0


if __name__ == "__main__":
    sys.exit(main())
