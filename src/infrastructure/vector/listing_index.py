"""Vector-similarity lookups over listing and review embeddings stored in ChromaDB."""

from typing import Any, Dict, List, Optional, Sequence

import chromadb

from src.config.settings import settings
from src.config.logging_config import get_logger
from src.domain.exceptions import StoreError
from src.domain.models import SimilarityMatch

logger = get_logger(__name__)


class ListingVectorIndex:
    """
    One embedding per id in a cosine-space collection.

    The default collection holds listings; review embeddings live in a second
    instance over `settings.review_collection_name`, tagged with their
    listing id so lookups can be scoped to one listing.

    Similarity is reported as 1 - cosine distance, so the thresholds used by
    callers live on the usual [-1, 1] cosine scale.
    """

    def __init__(self, client=None, collection_name: Optional[str] = None):
        try:
            self.client = client or chromadb.PersistentClient(path=settings.chroma_db_dir)
            self.collection = self.client.get_or_create_collection(
                name=collection_name or settings.collection_name,
                metadata={"hnsw:space": "cosine"},
            )
            logger.info(
                f"ListingVectorIndex '{self.collection.name}' initialized: "
                f"{self.collection.count()} vectors in collection"
            )
        except Exception as e:
            logger.error(f"Failed to initialize ListingVectorIndex: {str(e)}")
            raise

    def upsert(
        self,
        item_id: str,
        embedding: Sequence[float],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        try:
            self.collection.upsert(
                ids=[item_id],
                embeddings=[list(embedding)],
                metadatas=[metadata] if metadata else None,
            )
        except Exception as e:
            raise StoreError(f"Failed to upsert embedding for {item_id}: {e}") from e

    def remove(self, item_id: str) -> None:
        try:
            self.collection.delete(ids=[item_id])
        except Exception as e:
            raise StoreError(f"Failed to delete embedding for {item_id}: {e}") from e

    def _query(
        self,
        embedding: Sequence[float],
        n_results: int,
        where: Optional[Dict[str, Any]] = None,
    ) -> List[SimilarityMatch]:
        if n_results <= 0:
            return []
        count = self.collection.count()
        if count == 0:
            return []

        params = {
            "query_embeddings": [list(embedding)],
            "n_results": min(n_results, count),
            "include": ["distances"],
        }
        if where:
            params["where"] = where
        results = self.collection.query(**params)

        matches = []
        ids = results.get("ids") or [[]]
        distances = results.get("distances") or [[]]
        for item_id, distance in zip(ids[0], distances[0]):
            matches.append(SimilarityMatch(id=item_id, similarity=1.0 - float(distance)))
        return matches

    def match_listings(
        self,
        query_embedding: Sequence[float],
        similarity_threshold: float,
        max_results: int,
    ) -> List[SimilarityMatch]:
        """Listings closest to a query embedding, above the threshold."""
        try:
            matches = self._query(query_embedding, max_results)
        except Exception as e:
            raise StoreError(f"match_listings failed: {e}") from e
        return [m for m in matches if m.similarity >= similarity_threshold][:max_results]

    def similar_listings(
        self,
        listing_id: str,
        similarity_threshold: float,
        max_results: int,
    ) -> List[SimilarityMatch]:
        """Listings closest to an indexed listing, excluding the listing itself."""
        try:
            stored = self.collection.get(ids=[listing_id], include=["embeddings"])
            embeddings = stored.get("embeddings")
            if embeddings is None or len(embeddings) == 0:
                logger.info(f"No embedding indexed for listing {listing_id}")
                return []
            matches = self._query(embeddings[0], max_results + 1)
        except Exception as e:
            raise StoreError(f"similar_listings failed: {e}") from e

        return [
            m for m in matches
            if m.id != listing_id and m.similarity >= similarity_threshold
        ][:max_results]

    def match_reviews(
        self,
        query_embedding: Sequence[float],
        listing_id: str,
        similarity_threshold: float,
        max_results: int,
    ) -> List[SimilarityMatch]:
        """Reviews of one listing closest to a query embedding, above the threshold."""
        try:
            matches = self._query(query_embedding, max_results, where={"listing_id": listing_id})
        except Exception as e:
            raise StoreError(f"match_reviews failed: {e}") from e
        return [m for m in matches if m.similarity >= similarity_threshold][:max_results]
