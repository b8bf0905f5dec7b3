"""
In-memory chunk storage implementation.

Provides a simple in-memory store for reference-document chunks,
suitable for testing and development. For persistence, use the
SQLAlchemy implementation instead.
"""

import logging
import threading
from typing import Dict, List, Optional, Tuple

from casual_coach.models import Chunk

logger = logging.getLogger(__name__)


class InMemoryChunkStore:
    """
    In-memory implementation of the ChunkStore protocol.

    Stores chunks in a dictionary keyed by (source, source_id).
    Data is lost on restart.
    """

    def __init__(self):
        self._chunks: Dict[Tuple[str, str], Chunk] = {}
        self._lock = threading.Lock()

        logger.info("InMemoryChunkStore initialized")

    def upsert_chunks(self, chunks: List[Chunk]) -> int:
        """Insert or replace chunks."""
        if not chunks:
            return 0

        # Copy first so a bad item can't leave a half-written batch
        staged = {chunk.key: chunk.model_copy(deep=True) for chunk in chunks}

        with self._lock:
            self._chunks.update(staged)

        logger.debug(f"Upserted {len(chunks)} chunks (total: {len(self._chunks)})")
        return len(chunks)

    def get_chunk(self, source: str, source_id: str) -> Optional[Chunk]:
        """Retrieve a chunk by its key."""
        chunk = self._chunks.get((source, source_id))
        return chunk.model_copy(deep=True) if chunk else None

    def list_chunks(self, source: Optional[str] = None) -> List[Chunk]:
        """List stored chunks, ordered by key."""
        with self._lock:
            items = sorted(self._chunks.items())

        return [
            chunk.model_copy(deep=True)
            for key, chunk in items
            if source is None or key[0] == source
        ]

    def delete_source(self, source: str) -> int:
        """Delete every chunk from one source."""
        with self._lock:
            keys = [key for key in self._chunks if key[0] == source]
            for key in keys:
                del self._chunks[key]

        logger.info(f"Deleted {len(keys)} chunks for source={source}")
        return len(keys)

    def replace_source(self, source: str, chunks: List[Chunk]) -> int:
        """Swap every chunk of one source for a new set."""
        staged = {chunk.key: chunk.model_copy(deep=True) for chunk in chunks}

        with self._lock:
            for key in [key for key in self._chunks if key[0] == source]:
                del self._chunks[key]
            self._chunks.update(staged)

        logger.info(f"Replaced source={source} with {len(chunks)} chunks")
        return len(chunks)

    def count(self) -> int:
        """Get the number of stored chunks."""
        return len(self._chunks)

    def clear(self):
        """Clear ALL chunks from the store."""
        count = len(self._chunks)
        with self._lock:
            self._chunks.clear()
        logger.info(f"Cleared all chunks ({count} total)")
