"""Tests for cosine-similarity vector search."""

from unittest.mock import AsyncMock

import pytest

from casual_coach.errors import TransientProviderError
from casual_coach.models import Chunk
from casual_coach.search import RelevanceSearch, VectorSearch, cosine_similarity
from casual_coach.storage.chunks.memory import InMemoryChunkStore


class MockEmbedding:
    """Embedding stub returning a fixed query vector."""

    def __init__(self, vector):
        self.embed_query = AsyncMock(return_value=vector)
        self.embed_documents = AsyncMock(return_value=[])

    @property
    def dimension(self) -> int:
        return 2

    @property
    def model_name(self) -> str:
        return "mock-embedding"


@pytest.fixture
def chunk_store():
    """Chunk store with 2-dimensional vectors."""
    store = InMemoryChunkStore()
    store.upsert_chunks(
        [
            Chunk(source="docs", source_id="exact", text="HTML", vector=[1.0, 0.0]),
            Chunk(source="docs", source_id="close", text="HTML tags", vector=[0.9, 0.1]),
            Chunk(source="docs", source_id="far", text="JavaScript", vector=[0.0, 1.0]),
            Chunk(source="docs", source_id="text-only", text="CSS"),
        ]
    )
    return store


def test_cosine_similarity():
    """Test cosine similarity edge cases."""
    assert cosine_similarity([1.0, 0.0], [1.0, 0.0]) == pytest.approx(1.0)
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
    assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == 0.0

    with pytest.raises(ValueError):
        cosine_similarity([1.0], [1.0, 0.0])


def test_protocol_compliance(chunk_store):
    """Test that VectorSearch satisfies RelevanceSearch."""
    search = VectorSearch(chunk_store, MockEmbedding([1.0, 0.0]))

    assert isinstance(search, RelevanceSearch)
    assert search.default_threshold == 0.7


@pytest.mark.asyncio
async def test_search_ranks_by_similarity(chunk_store):
    """Test that results above the threshold are returned best first."""
    embedding = MockEmbedding([1.0, 0.0])
    search = VectorSearch(chunk_store, embedding)

    results = await search.search("what is html")

    assert [r.chunk.source_id for r in results] == ["exact", "close"]
    assert results[0].similarity == pytest.approx(1.0)
    embedding.embed_query.assert_awaited_once_with("what is html")


@pytest.mark.asyncio
async def test_explicit_threshold(chunk_store):
    """Test that a lower threshold admits weaker matches."""
    search = VectorSearch(chunk_store, MockEmbedding([1.0, 0.0]))

    results = await search.search("anything", threshold=0.0)

    assert [r.chunk.source_id for r in results] == ["exact", "close", "far"]


@pytest.mark.asyncio
async def test_mismatched_dimension_skipped(chunk_store):
    """Test that vectors of another dimension are ignored."""
    chunk_store.upsert_chunks(
        [Chunk(source="docs", source_id="old-model", text="HTML", vector=[1.0, 0.0, 0.0])]
    )
    search = VectorSearch(chunk_store, MockEmbedding([1.0, 0.0]))

    results = await search.search("html")

    assert "old-model" not in [r.chunk.source_id for r in results]


@pytest.mark.asyncio
async def test_embedding_failure_returns_empty(chunk_store):
    """Test that an unavailable embedding provider degrades to no results."""
    embedding = MockEmbedding([1.0, 0.0])
    embedding.embed_query.side_effect = TransientProviderError("rate limited", "openai")

    assert await VectorSearch(chunk_store, embedding).search("html") == []


@pytest.mark.asyncio
async def test_empty_query_skips_embedding(chunk_store):
    """Test that blank queries never reach the provider."""
    embedding = MockEmbedding([1.0, 0.0])

    assert await VectorSearch(chunk_store, embedding).search("  ") == []
    embedding.embed_query.assert_not_called()
