"""
Text embedding abstractions for casual-coach.

Provides a protocol-based embedding interface and an OpenAI API adapter.
Embeddings are only needed when vector search is the active strategy.
"""

from casual_coach.embeddings.protocol import TextEmbedding

__all__ = [
    "TextEmbedding",
]

# Optional adapters (import only if dependencies available)
try:
    from casual_coach.embeddings.openai_embedding import OpenAIEmbedding  # noqa: F401

    __all__.append("OpenAIEmbedding")
except ImportError:
    pass
