"""
Text chunking for retrieval.
"""

from casual_coach.chunking.chunker import chunk_records, chunk_text, split_sentences

__all__ = [
    "chunk_text",
    "chunk_records",
    "split_sentences",
]
