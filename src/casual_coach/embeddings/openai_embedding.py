"""OpenAI embedding adapter for casual-coach."""

import logging
from typing import List, Optional

from casual_coach.errors import TransientProviderError

logger = logging.getLogger(__name__)

_MODEL_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbedding:
    """
    Embedding adapter using OpenAI's embedding API.

    Also compatible with OpenAI-compatible APIs (Azure, OpenRouter, etc.)
    through ``base_url``.

    Example:
        >>> embedder = OpenAIEmbedding(model="text-embedding-3-large", api_key="sk-...")
        >>> vectors = await embedder.embed_documents(["HTML is for structure."])
        >>> len(vectors[0])
        3072
    """

    def __init__(
        self,
        model: str = "text-embedding-3-large",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        dimensions: Optional[int] = None,
        timeout: float = 30.0,
        max_retries: int = 2,
        client=None,
    ):
        """
        Initialize OpenAI embedder.

        Args:
            model: OpenAI model name (default: text-embedding-3-large)
            api_key: OpenAI API key
            base_url: Custom endpoint (None = official OpenAI)
            dimensions: Output dimension (only for text-embedding-3 models)
            timeout: Request timeout in seconds
            max_retries: Number of retry attempts made by the client
            client: Optional pre-built AsyncOpenAI client
        """
        if client is None:
            try:
                from openai import AsyncOpenAI
            except ImportError as e:
                raise ImportError(
                    "openai is required for OpenAIEmbedding. "
                    "Install with: pip install casual-coach[openai]"
                ) from e

            client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=max_retries,
            )

        self._client = client
        self._model = model
        self._dimensions = dimensions
        self._dimension = dimensions or _MODEL_DIMENSIONS.get(model, 0)

        logger.info(f"OpenAI embedder initialized: {model} ({self._dimension or 'unknown'} dimensions)")

    @property
    def dimension(self) -> int:
        """Vector dimension produced by this model (0 until known for custom models)."""
        return self._dimension

    @property
    def model_name(self) -> str:
        """Identifier of the OpenAI model."""
        return self._model

    async def _create(self, texts: List[str]) -> List[List[float]]:
        kwargs = {"model": self._model, "input": texts, "encoding_format": "float"}
        if self._dimensions is not None:
            kwargs["dimensions"] = self._dimensions

        try:
            response = await self._client.embeddings.create(**kwargs)
        except Exception as e:
            logger.error(f"Embedding request failed: {type(e).__name__}")
            raise TransientProviderError(f"Failed to generate embeddings: {e}", "openai") from e

        vectors = [item.embedding for item in response.data]
        if vectors and not self._dimension:
            self._dimension = len(vectors[0])
        return vectors

    async def embed_query(self, text: str) -> List[float]:
        """Generate embedding for a search query."""
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        vectors = await self._create([text])
        return vectors[0]

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for a batch of documents.

        The whole batch goes out in a single API request; an empty batch
        makes no request at all.
        """
        if not texts:
            return []

        if any(not text or not text.strip() for text in texts):
            raise ValueError("Cannot embed empty texts in batch")

        vectors = await self._create(texts)
        if len(vectors) != len(texts):
            raise TransientProviderError(
                f"Embedding response size mismatch ({len(vectors)} != {len(texts)})", "openai"
            )
        return vectors
