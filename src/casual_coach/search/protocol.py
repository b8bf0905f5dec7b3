"""
Relevance search protocol.

Strategies rank stored chunks against a query. Their scores are not on a
common scale, so each strategy carries its own default threshold.
"""

from typing import List, Optional, Protocol

from typing_extensions import runtime_checkable

from casual_coach.models import ScoredChunk


@runtime_checkable
class RelevanceSearch(Protocol):
    """
    Protocol for relevance search strategies.

    Implementations must:

    1. Return results in non-increasing similarity order, at most ``limit``
    2. Break score ties by (source, source_id) so output is reproducible
    3. Return [] instead of raising when the backend fails
    """

    @property
    def default_threshold(self) -> float:
        """Threshold used when search() is called without one."""
        ...

    async def search(
        self,
        query: str,
        limit: int = 8,
        threshold: Optional[float] = None,
    ) -> List[ScoredChunk]:
        """
        Find the chunks most relevant to a query.

        Args:
            query: Free-text query
            limit: Maximum number of results
            threshold: Minimum score (None = strategy default)

        Returns:
            Scored chunks, best first
        """
        ...


def rank(results: List[ScoredChunk], limit: int) -> List[ScoredChunk]:
    """Sort scored chunks best-first with a stable key tie-break, then truncate."""
    ordered = sorted(
        results,
        key=lambda r: (-r.similarity, r.chunk.source, r.chunk.source_id),
    )
    return ordered[:limit]
