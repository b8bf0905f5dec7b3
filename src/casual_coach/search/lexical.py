"""
Lexical (BM25) relevance search.

Scores chunks by term-frequency overlap with the query. The score is rank
metadata only: it is unbounded and not comparable with cosine similarity.
"""

import asyncio
import logging
import math
import re
from collections import Counter
from typing import Dict, List, Optional

from casual_coach.models import Chunk, ScoredChunk
from casual_coach.search.protocol import rank
from casual_coach.storage import ChunkStore

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"[a-z0-9]+")

STOP_WORDS = frozenset(
    """
    a an and are as at be but by can do does did for from had has have how i if in
    into is it its me my of on or our so that the their them then there these they
    this to was we were what when where which who why will with you your
    """.split()
)


def _stem(token: str) -> str:
    # Plural folding only ("pages" -> "page"); keeps "css", "class"
    if len(token) > 3 and token.endswith("s") and not token.endswith("ss"):
        return token[:-1]
    return token


def tokenize(text: str) -> List[str]:
    """Lowercase word tokens with stop words removed and plurals folded."""
    return [_stem(t) for t in _TOKEN.findall(text.lower()) if t not in STOP_WORDS]


class LexicalSearch:
    """
    BM25 ranking over every chunk in a store.

    The corpus statistics are computed per query from the store contents,
    which keeps the strategy stateless and always consistent with upserts.

    Args:
        store: Chunk store to search
        k1: Term-frequency saturation (default: 1.5)
        b: Length normalization (default: 0.75)
        default_threshold: Minimum score a result must exceed (default: 0.0)
    """

    def __init__(
        self,
        store: ChunkStore,
        k1: float = 1.5,
        b: float = 0.75,
        default_threshold: float = 0.0,
    ):
        self.store = store
        self.k1 = k1
        self.b = b
        self._default_threshold = default_threshold

    @property
    def default_threshold(self) -> float:
        return self._default_threshold

    def score_chunks(self, query: str, chunks: List[Chunk]) -> List[ScoredChunk]:
        """Score chunks against a query; chunks with no matching term are left out."""
        query_terms = set(tokenize(query))
        if not query_terms or not chunks:
            return []

        documents = [Counter(tokenize(chunk.text)) for chunk in chunks]
        total = len(documents)
        avg_length = sum(sum(doc.values()) for doc in documents) / total or 1.0

        document_frequency: Dict[str, int] = {
            term: sum(1 for doc in documents if term in doc) for term in query_terms
        }

        results = []
        for chunk, doc in zip(chunks, documents):
            length = sum(doc.values())
            score = 0.0
            for term in query_terms:
                tf = doc.get(term, 0)
                if not tf:
                    continue
                df = document_frequency[term]
                idf = math.log(1 + (total - df + 0.5) / (df + 0.5))
                norm = self.k1 * (1 - self.b + self.b * length / avg_length)
                score += idf * tf * (self.k1 + 1) / (tf + norm)

            if score > 0:
                results.append(ScoredChunk(chunk=chunk, similarity=score))

        return results

    def _search_sync(self, query: str, limit: int, threshold: float) -> List[ScoredChunk]:
        chunks = self.store.list_chunks()
        scored = [r for r in self.score_chunks(query, chunks) if r.similarity > threshold]
        return rank(scored, limit)

    async def search(
        self,
        query: str,
        limit: int = 8,
        threshold: Optional[float] = None,
    ) -> List[ScoredChunk]:
        """Find the chunks sharing the most weighted terms with the query."""
        if not query or not query.strip() or limit < 1:
            return []

        if threshold is None:
            threshold = self._default_threshold

        try:
            results = await asyncio.to_thread(self._search_sync, query, limit, threshold)
        except Exception as e:
            logger.error(f"Lexical search failed: {type(e).__name__}: {e}")
            return []

        logger.debug(f"Lexical search returned {len(results)} results (threshold={threshold})")
        return results
