"""
Vector (cosine similarity) relevance search.

Embeds the query and compares it with the vectors stored alongside chunks.
Chunks stored without a vector are not searchable by this strategy.
"""

import asyncio
import logging
from typing import List, Optional

from casual_coach.embeddings import TextEmbedding
from casual_coach.models import ScoredChunk
from casual_coach.search.protocol import rank
from casual_coach.storage import ChunkStore

logger = logging.getLogger(__name__)


def cosine_similarity(vec1: List[float], vec2: List[float]) -> float:
    """Calculate cosine similarity between two vectors."""
    if len(vec1) != len(vec2):
        raise ValueError("Vectors must have the same length")

    dot_product = sum(a * b for a, b in zip(vec1, vec2))
    magnitude1 = sum(a * a for a in vec1) ** 0.5
    magnitude2 = sum(b * b for b in vec2) ** 0.5

    if magnitude1 == 0 or magnitude2 == 0:
        return 0.0

    return dot_product / (magnitude1 * magnitude2)


class VectorSearch:
    """
    Cosine-similarity ranking over stored chunk vectors.

    Args:
        store: Chunk store holding vectors
        embedding: Embedding provider used for the query
        default_threshold: Minimum cosine similarity (default: 0.7)
    """

    def __init__(
        self,
        store: ChunkStore,
        embedding: TextEmbedding,
        default_threshold: float = 0.7,
    ):
        self.store = store
        self.embedding = embedding
        self._default_threshold = default_threshold

    @property
    def default_threshold(self) -> float:
        return self._default_threshold

    def _search_sync(
        self, query_vector: List[float], limit: int, threshold: float
    ) -> List[ScoredChunk]:
        results = []
        skipped = 0

        for chunk in self.store.list_chunks():
            if not chunk.vector:
                continue
            if len(chunk.vector) != len(query_vector):
                skipped += 1
                continue

            score = cosine_similarity(query_vector, chunk.vector)
            if score >= threshold:
                results.append(ScoredChunk(chunk=chunk, similarity=score))

        if skipped:
            logger.warning(f"Skipped {skipped} chunks with mismatched vector dimension")

        return rank(results, limit)

    async def search(
        self,
        query: str,
        limit: int = 8,
        threshold: Optional[float] = None,
    ) -> List[ScoredChunk]:
        """Find the chunks whose vectors are closest to the query's."""
        if not query or not query.strip() or limit < 1:
            return []

        if threshold is None:
            threshold = self._default_threshold

        try:
            query_vector = await self.embedding.embed_query(query)
            results = await asyncio.to_thread(self._search_sync, query_vector, limit, threshold)
        except Exception as e:
            logger.error(f"Vector search failed: {type(e).__name__}: {e}")
            return []

        logger.debug(
            f"{len(results)} results found (threshold={threshold}, "
            f"model={self.embedding.model_name})"
        )
        return results
