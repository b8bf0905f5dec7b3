"""
Text embedding protocol for casual-coach.

Provides a unified interface for embedding chunk text and search queries
into dense vectors for cosine-similarity search.
"""

from typing import List, Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class TextEmbedding(Protocol):
    """
    Protocol for text embedding providers.

    Only required when vector search is the active relevance strategy.
    Implementations must:

    1. Return deterministic vectors for the same input
    2. Return vectors of a fixed dimension
    3. Embed a whole batch of documents in one provider call
    4. Raise TransientProviderError when the backend is unavailable

    Example:
        >>> embedder = OpenAIEmbedding()
        >>> vectors = await embedder.embed_documents(["CSS is for style."])
        >>> len(vectors[0]) == embedder.dimension
        True
    """

    @property
    def dimension(self) -> int:
        """Vector dimension produced by this embedder."""
        ...

    @property
    def model_name(self) -> str:
        """Identifier of the embedding model (e.g., "text-embedding-3-large")."""
        ...

    async def embed_query(self, text: str) -> List[float]:
        """
        Generate embedding for a search query.

        Args:
            text: Query text to embed

        Returns:
            Embedding vector

        Raises:
            ValueError: If text is empty
            TransientProviderError: If the provider call fails
        """
        ...

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for a batch of documents in one call.

        Args:
            texts: List of document texts

        Returns:
            List of embedding vectors (same order as input, [] for empty input)

        Raises:
            ValueError: If any text is empty
            TransientProviderError: If the provider call fails
        """
        ...
