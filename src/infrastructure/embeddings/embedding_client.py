"""Sentence-transformer embeddings for chat messages and listings."""

from typing import List

from chromadb.utils import embedding_functions

from src.config.settings import settings
from src.config.logging_config import get_logger
from src.domain.exceptions import EmbeddingError
from src.domain.models import Listing

logger = get_logger(__name__)


def listing_document(listing: Listing) -> str:
    """Text that represents a listing in the vector index."""
    parts = [listing.title, listing.description or "", listing.category]
    return "\n".join(part.strip() for part in parts if part and part.strip())


class EmbeddingClient:
    """Wrapper around the sentence-transformer embedding function."""

    def __init__(self, model_name: str = None):
        try:
            self.model_name = model_name or settings.embedding_model
            self.embedding_function = embedding_functions.SentenceTransformerEmbeddingFunction(
                model_name=self.model_name
            )
            logger.info(f"Embedding client initialized with model: {self.model_name}")
        except Exception as e:
            logger.error(f"Failed to initialize embedding model: {str(e)}")
            raise

    def embed(self, text: str) -> List[float]:
        """
        Embed a single text.

        Raises:
            EmbeddingError: If the model call fails or returns nothing
        """
        try:
            vectors = self.embedding_function([text])
        except Exception as e:
            logger.error(f"Embedding failed: {e}")
            raise EmbeddingError(str(e)) from e

        if vectors is None or len(vectors) == 0:
            raise EmbeddingError("Embedding model returned no vector")
        return [float(x) for x in vectors[0]]

    def embed_listing(self, listing: Listing) -> List[float]:
        return self.embed(listing_document(listing))
