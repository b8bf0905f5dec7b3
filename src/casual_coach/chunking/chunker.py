"""
Sentence-based text chunking.

Splits text into bounded, overlapping chunks suitable for indexing and for
fitting into a prompt. Sizes are approximated in characters (4 characters
per token).
"""

import logging
import math
import re
from typing import Iterable, List

from casual_coach.errors import InputValidationError
from casual_coach.models import Chunk, IngestRecord

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")


def split_sentences(text: str) -> List[str]:
    """Split text on terminal punctuation, dropping empty units."""
    return [s.strip() for s in _SENTENCE_BOUNDARY.split(text) if s.strip()]


def _overlap_words(buffer: str, overlap_fraction: float) -> str:
    words = buffer.split()
    count = math.floor(len(words) * overlap_fraction)
    if count <= 0:
        return ""
    return " ".join(words[-count:])


def chunk_text(
    text: str,
    max_size_hint: int = 1000,
    overlap_fraction: float = 0.15,
) -> List[str]:
    """
    Split text into overlapping chunks.

    Sentences are accumulated greedily until adding the next one would push
    the buffer past ``max_size_hint * 4`` characters. The next buffer starts
    with the trailing ``overlap_fraction`` of the previous buffer's words.
    A sentence longer than the threshold is kept whole as its own chunk.

    Args:
        text: Text to split
        max_size_hint: Approximate chunk size in tokens (default: 1000)
        overlap_fraction: Fraction of words carried into the next chunk (default: 0.15)

    Returns:
        List of non-empty chunks (empty only for blank text)

    Raises:
        InputValidationError: If max_size_hint or overlap_fraction is out of range
    """
    if max_size_hint < 1:
        raise InputValidationError(f"max_size_hint must be positive, got {max_size_hint}")
    if not 0.0 <= overlap_fraction < 1.0:
        raise InputValidationError(
            f"overlap_fraction must be in [0, 1), got {overlap_fraction}"
        )

    threshold = max_size_hint * CHARS_PER_TOKEN
    chunks: List[str] = []
    buffer = ""

    for sentence in split_sentences(text):
        candidate = f"{buffer}{sentence}. "
        if len(candidate) <= threshold:
            buffer = candidate
            continue

        if buffer:
            chunks.append(buffer.strip())
            overlap = _overlap_words(buffer, overlap_fraction)
            buffer = f"{overlap} {sentence}. " if overlap else f"{sentence}. "
        else:
            buffer = f"{sentence}. "

    if buffer.strip():
        chunks.append(buffer.strip())
    elif text.strip():
        # Punctuation only, e.g. "..."
        chunks.append(text.strip())

    return chunks


def chunk_records(
    records: Iterable[IngestRecord],
    max_size_hint: int = 1000,
    overlap_fraction: float = 0.15,
) -> List[Chunk]:
    """
    Expand ingest records into chunks.

    Each chunk's source_id is the record's source_id suffixed with the chunk
    index, e.g. ``"README.md-0"``.
    """
    chunks: List[Chunk] = []
    for record in records:
        pieces = chunk_text(record.text, max_size_hint, overlap_fraction)
        if not pieces:
            logger.warning(f"Record {record.source}/{record.source_id} produced no chunks")
            continue
        for index, piece in enumerate(pieces):
            chunks.append(
                Chunk(source=record.source, source_id=f"{record.source_id}-{index}", text=piece)
            )

    logger.debug(f"Chunked records into {len(chunks)} chunks")
    return chunks
