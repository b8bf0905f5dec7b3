"""
Write path for reference documents.

Validates chunks, attaches embedding vectors (when an embedding provider is
configured) and writes them to a chunk store.
"""

import asyncio
import logging
from typing import Iterable, List, Optional

from casual_coach.chunking import chunk_records
from casual_coach.embeddings import TextEmbedding
from casual_coach.errors import DataIntegrityError, InputValidationError, TransientProviderError
from casual_coach.models import Chunk, IngestRecord
from casual_coach.storage import ChunkStore

logger = logging.getLogger(__name__)


def validate_chunk(chunk: Chunk) -> None:
    """Reject chunks with a blank key or blank text."""
    if not chunk.source or not chunk.source.strip():
        raise InputValidationError("Chunk source must not be empty")
    if not chunk.source_id or not chunk.source_id.strip():
        raise InputValidationError(f"Chunk source_id must not be empty (source={chunk.source})")
    if not chunk.text or not chunk.text.strip():
        raise InputValidationError(
            f"Chunk text must not be empty ({chunk.source}/{chunk.source_id})"
        )


class ChunkIndex:
    """
    Chunk ingestion and upsert service.

    When an embedding provider is given, every upsert makes exactly one
    batch embedding call for the whole list before writing. Without one,
    chunks are stored text-only (enough for lexical search).
    """

    def __init__(
        self,
        store: ChunkStore,
        embedding: Optional[TextEmbedding] = None,
        max_size_hint: int = 1000,
        overlap_fraction: float = 0.15,
    ):
        self.store = store
        self.embedding = embedding
        self.max_size_hint = max_size_hint
        self.overlap_fraction = overlap_fraction

    async def _prepare(self, chunks: List[Chunk]) -> List[Chunk]:
        for chunk in chunks:
            validate_chunk(chunk)

        if self.embedding is None:
            return chunks

        vectors = await self.embedding.embed_documents([chunk.text for chunk in chunks])
        if len(vectors) != len(chunks):
            raise TransientProviderError(
                f"Embedding provider returned {len(vectors)} vectors for {len(chunks)} chunks",
                self.embedding.model_name,
            )

        return [
            chunk.model_copy(update={"vector": vector}) for chunk, vector in zip(chunks, vectors)
        ]

    async def _write(self, operation: str, write, *args) -> int:
        try:
            written = await asyncio.to_thread(write, *args)
        except DataIntegrityError:
            raise
        except Exception as e:
            logger.error(f"Failed to {operation} chunks: {e}")
            raise DataIntegrityError(f"Failed to {operation} chunks: {e}", operation) from e
        return written

    async def upsert(self, chunks: List[Chunk]) -> int:
        """
        Embed and write chunks.

        Args:
            chunks: Chunks to write (any vectors present are replaced)

        Returns:
            Number of chunks written (0 for an empty list, with no I/O)

        Raises:
            InputValidationError: If any chunk is malformed (nothing is written)
            TransientProviderError: If the embedding provider fails or returns
                the wrong number of vectors (nothing is written)
            DataIntegrityError: If the store write fails
        """
        if not chunks:
            return 0

        chunks = await self._prepare(chunks)
        written = await self._write("upsert", self.store.upsert_chunks, chunks)

        logger.info(f"Upserted {written} chunks")
        return written

    async def ingest(self, records: Iterable[IngestRecord]) -> int:
        """
        Chunk raw records and upsert the result.

        Args:
            records: Records from any content connector

        Returns:
            Number of chunks written
        """
        chunks = chunk_records(records, self.max_size_hint, self.overlap_fraction)
        return await self.upsert(chunks)

    async def replace(self, source: str, records: Iterable[IngestRecord]) -> int:
        """
        Re-ingest one source, dropping chunks that are no longer produced.

        Chunks are validated and embedded before the store is touched, and
        the delete and the write happen in one store transaction, so a
        failure leaves the previous chunks of the source in place.

        Args:
            source: Source whose chunks are replaced
            records: Records from that source

        Returns:
            Number of chunks written

        Raises:
            InputValidationError: If a record belongs to another source
        """
        chunks = chunk_records(records, self.max_size_hint, self.overlap_fraction)
        foreign = sorted({chunk.source for chunk in chunks if chunk.source != source})
        if foreign:
            raise InputValidationError(
                f"Cannot replace source '{source}' with chunks from {', '.join(foreign)}"
            )

        chunks = await self._prepare(chunks)
        written = await self._write("replace", self.store.replace_source, source, chunks)

        logger.info(f"Replaced source '{source}' with {written} chunks")
        return written
