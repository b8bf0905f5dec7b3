"""
Relevance search strategies.

- LexicalSearch: BM25 term-frequency ranking (no embeddings needed)
- VectorSearch: cosine similarity over stored embedding vectors
"""

from casual_coach.search.lexical import LexicalSearch, tokenize
from casual_coach.search.protocol import RelevanceSearch, rank
from casual_coach.search.vector import VectorSearch, cosine_similarity

__all__ = [
    "RelevanceSearch",
    "LexicalSearch",
    "VectorSearch",
    "cosine_similarity",
    "rank",
    "tokenize",
]
