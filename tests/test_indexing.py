"""Tests for the chunk ingestion and upsert service."""

from unittest.mock import AsyncMock, Mock

import pytest

from casual_coach.errors import DataIntegrityError, InputValidationError, TransientProviderError
from casual_coach.indexing import ChunkIndex, validate_chunk
from casual_coach.models import Chunk, IngestRecord
from casual_coach.storage.chunks.memory import InMemoryChunkStore


class MockEmbedding:
    """Embedding stub producing one vector per document."""

    def __init__(self):
        self.embed_documents = AsyncMock(
            side_effect=lambda texts: [[float(len(text)), 1.0] for text in texts]
        )
        self.embed_query = AsyncMock(return_value=[1.0, 1.0])

    @property
    def dimension(self) -> int:
        return 2

    @property
    def model_name(self) -> str:
        return "mock-embedding"


@pytest.fixture
def chunk_store():
    """Create a fresh in-memory chunk store."""
    return InMemoryChunkStore()


@pytest.fixture
def embedding():
    """Create a mock embedding provider."""
    return MockEmbedding()


@pytest.fixture
def chunks():
    """Valid chunks."""
    return [
        Chunk(source="docs", source_id="1", text="HTML is for structure."),
        Chunk(source="docs", source_id="2", text="CSS is for style."),
        Chunk(source="docs", source_id="3", text="JS is for behaviour."),
    ]


@pytest.mark.parametrize(
    "chunk",
    [
        Chunk(source="", source_id="1", text="text"),
        Chunk(source="docs", source_id=" ", text="text"),
        Chunk(source="docs", source_id="1", text=""),
    ],
)
def test_validate_chunk_rejects_blank_fields(chunk):
    """Test that blank keys and text are rejected."""
    with pytest.raises(InputValidationError):
        validate_chunk(chunk)


@pytest.mark.asyncio
async def test_upsert_embeds_whole_batch_once(chunk_store, embedding, chunks):
    """Test that one embedding call covers the whole batch."""
    index = ChunkIndex(chunk_store, embedding=embedding)

    written = await index.upsert(chunks)

    assert written == 3
    embedding.embed_documents.assert_awaited_once_with(
        ["HTML is for structure.", "CSS is for style.", "JS is for behaviour."]
    )
    assert chunk_store.get_chunk("docs", "2").vector == [17.0, 1.0]


@pytest.mark.asyncio
async def test_upsert_without_embedding_stores_text_only(chunk_store, chunks):
    """Test lexical-only indexing."""
    index = ChunkIndex(chunk_store)

    await index.upsert(chunks)

    assert chunk_store.count() == 3
    assert chunk_store.get_chunk("docs", "1").vector is None


@pytest.mark.asyncio
async def test_upsert_empty_batch_is_noop(chunk_store, embedding):
    """Test that an empty list performs no I/O."""
    index = ChunkIndex(chunk_store, embedding=embedding)

    assert await index.upsert([]) == 0
    embedding.embed_documents.assert_not_called()


@pytest.mark.asyncio
async def test_upsert_rejects_malformed_batch_before_io(chunk_store, embedding, chunks):
    """Test that one bad chunk aborts the batch before embedding or writing."""
    index = ChunkIndex(chunk_store, embedding=embedding)
    bad = chunks + [Chunk(source="docs", source_id="4", text="   ")]

    with pytest.raises(InputValidationError):
        await index.upsert(bad)

    embedding.embed_documents.assert_not_called()
    assert chunk_store.count() == 0


@pytest.mark.asyncio
async def test_embedding_failure_writes_nothing(chunk_store, embedding, chunks):
    """Test that a provider failure leaves the store untouched."""
    embedding.embed_documents.side_effect = TransientProviderError("rate limited", "openai")
    index = ChunkIndex(chunk_store, embedding=embedding)

    with pytest.raises(TransientProviderError):
        await index.upsert(chunks)

    assert chunk_store.count() == 0


@pytest.mark.asyncio
async def test_store_failure_raises_integrity_error(chunks):
    """Test that unexpected store errors are reported as DataIntegrityError."""
    store = Mock()
    store.upsert_chunks.side_effect = RuntimeError("disk full")
    index = ChunkIndex(store)

    with pytest.raises(DataIntegrityError):
        await index.upsert(chunks)


@pytest.mark.asyncio
async def test_upsert_twice_is_idempotent(chunk_store, embedding, chunks):
    """Test that re-ingesting the same chunks changes nothing."""
    index = ChunkIndex(chunk_store, embedding=embedding)

    await index.upsert(chunks)
    first = chunk_store.list_chunks()
    await index.upsert(chunks)

    assert chunk_store.list_chunks() == first


@pytest.mark.asyncio
async def test_ingest_chunks_records(chunk_store):
    """Test chunking raw records end to end."""
    index = ChunkIndex(chunk_store, max_size_hint=5, overlap_fraction=0.0)
    records = [
        IngestRecord(
            source="internal",
            source_id="intro.md",
            text="one two three four. five six seven eight. nine ten.",
        )
    ]

    written = await index.ingest(records)

    assert written == 3
    assert [c.source_id for c in chunk_store.list_chunks()] == [
        "intro.md-0",
        "intro.md-1",
        "intro.md-2",
    ]


@pytest.mark.asyncio
async def test_short_vector_batch_writes_nothing(chunk_store, embedding, chunks):
    """Test that a provider returning too few vectors aborts the whole batch."""
    embedding.embed_documents.side_effect = None
    embedding.embed_documents.return_value = [[1.0, 1.0]]
    index = ChunkIndex(chunk_store, embedding=embedding)

    with pytest.raises(TransientProviderError) as exc_info:
        await index.upsert(chunks)

    assert exc_info.value.provider == "mock-embedding"
    assert chunk_store.count() == 0


@pytest.mark.asyncio
async def test_replace_drops_stale_chunks(chunk_store):
    """Test that replacing a source removes chunks it no longer produces."""
    index = ChunkIndex(chunk_store)
    await index.upsert(
        [
            Chunk(source="notion", source_id="old.md-0", text="Old page."),
            Chunk(source="docs", source_id="1", text="HTML is for structure."),
        ]
    )

    written = await index.replace(
        "notion", [IngestRecord(source="notion", source_id="new.md", text="New page.")]
    )

    assert written == 1
    assert [c.key for c in chunk_store.list_chunks()] == [
        ("docs", "1"),
        ("notion", "new.md-0"),
    ]


@pytest.mark.asyncio
async def test_replace_keeps_source_when_embedding_fails(chunk_store, embedding):
    """Test that a failed re-ingest leaves the previous chunks in place."""
    index = ChunkIndex(chunk_store, embedding=embedding)
    await index.upsert([Chunk(source="notion", source_id="old.md-0", text="Old page.")])
    embedding.embed_documents.side_effect = TransientProviderError("rate limited", "openai")

    with pytest.raises(TransientProviderError):
        await index.replace(
            "notion", [IngestRecord(source="notion", source_id="new.md", text="New page.")]
        )

    assert [c.source_id for c in chunk_store.list_chunks(source="notion")] == ["old.md-0"]


@pytest.mark.asyncio
async def test_replace_rejects_records_from_other_sources(chunk_store):
    """Test that replace only accepts records of the replaced source."""
    index = ChunkIndex(chunk_store)

    with pytest.raises(InputValidationError):
        await index.replace(
            "notion", [IngestRecord(source="docs", source_id="a.md", text="Some text.")]
        )

    assert chunk_store.count() == 0
