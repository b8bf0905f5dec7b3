"""Tests for context assembly and prompt rendering."""

from unittest.mock import AsyncMock, Mock

import pytest

from casual_coach.context import ContextAssembler, format_for_prompt, needs_enrichment
from casual_coach.models import (
    SUMMARY_MARKER,
    Chunk,
    Message,
    RetrievalContext,
    ScoredChunk,
    SessionSummary,
    SkillSignal,
)
from casual_coach.search import LexicalSearch
from casual_coach.storage.chunks.memory import InMemoryChunkStore
from casual_coach.storage.conversations.memory import InMemoryConversationStore
from casual_coach.summarizer import SessionSummarizer


@pytest.fixture
def conversation_store():
    """Conversation store with a short session."""
    store = InMemoryConversationStore()
    store.append("s1", Message(role="user", content="I created my first page"))
    store.append("s1", Message(role="assistant", content="Nice. Now add a heading."))
    return store


@pytest.fixture
def chunk_store():
    """Chunk store with reference material."""
    store = InMemoryChunkStore()
    store.upsert_chunks(
        [
            Chunk(source="docs", source_id="1", text="HTML is for structure."),
            Chunk(source="docs", source_id="2", text="CSS is for style."),
        ]
    )
    return store


@pytest.fixture
def summarizer(conversation_store):
    """Summarizer with a mocked completion provider."""
    completion = Mock()
    completion.complete = AsyncMock(return_value="Learned tags.")
    return SessionSummarizer(conversation_store, completion)


@pytest.fixture
def assembler(conversation_store, chunk_store, summarizer):
    """Assembler over in-memory stores and lexical search."""
    return ContextAssembler(conversation_store, LexicalSearch(chunk_store), summarizer)


@pytest.mark.parametrize(
    "message,expected",
    [
        ("hi", False),
        ("thanks!", False),
        ("how do I center a div", True),
        ("My layout is broken", True),
        ("I get an ERROR in the console", True),
    ],
)
def test_needs_enrichment(message, expected):
    """Test the enrichment keyword heuristic."""
    assert needs_enrichment(message) is expected


def test_format_empty_context():
    """Test that an empty context renders only the question."""
    assert format_for_prompt(RetrievalContext(), "hello") == "CURRENT QUESTION: hello"


def test_format_section_order():
    """Test that sections appear in fixed order, separated by blank lines."""
    context = RetrievalContext(
        recent_messages=[Message(role="user", content="Hi")],
        relevant_chunks=[
            ScoredChunk(chunk=Chunk(source="docs", source_id="2", text="CSS is for style."), similarity=1.2)
        ],
        summary=f"{SUMMARY_MARKER} Learned tags.",
        skill_signals=[SkillSignal(skill="html-basics", score_delta=10, evidence="Used created")],
    )

    prompt = format_for_prompt(context, "how do I style a page")

    assert prompt.split("\n\n") == [
        f"CONVERSATION SUMMARY: {SUMMARY_MARKER} Learned tags.",
        "SKILL PROGRESS: html-basics: +10 (Used created)",
        "RECENT CONVERSATION:\nuser: Hi",
        "RELEVANT LEARNING MATERIALS:\ndocs: CSS is for style.",
        "CURRENT QUESTION: how do I style a page",
    ]


def test_format_truncates_history_and_chunks():
    """Test that only the last six messages and top three chunks are rendered."""
    context = RetrievalContext(
        recent_messages=[Message(role="user", content=f"m{i}") for i in range(10)],
        relevant_chunks=[
            ScoredChunk(
                chunk=Chunk(source="docs", source_id=str(i), text=f"chunk {i}"),
                similarity=10.0 - i,
            )
            for i in range(5)
        ],
    )

    prompt = format_for_prompt(context, "q")

    assert "user: m3" not in prompt
    assert "user: m4\n" in prompt
    assert "docs: chunk 2" in prompt
    assert "docs: chunk 3" not in prompt


def test_format_skill_without_evidence():
    """Test the placeholder for signals with no evidence."""
    context = RetrievalContext(skill_signals=[SkillSignal(skill="css-selectors", score_delta=-5)])

    assert "css-selectors: -5 (no notes)" in format_for_prompt(context, "q")


@pytest.mark.asyncio
async def test_build_context_gathers_everything(assembler, conversation_store):
    """Test that all four lookups contribute."""
    conversation_store.add_summary(SessionSummary(session_id="s1", summary="Learned tags."))

    context = await assembler.build_context("how do I style a page", "s1")

    assert [m.content for m in context.recent_messages] == [
        "I created my first page",
        "Nice. Now add a heading.",
    ]
    assert context.relevant_chunks[0].chunk.key == ("docs", "2")
    assert context.summary.startswith(f"{SUMMARY_MARKER} Learned tags.")
    assert context.skill_signals[0].skill == "html-basics"


@pytest.mark.asyncio
async def test_build_context_unknown_session(assembler):
    """Test that a new session yields empty history and no summary."""
    context = await assembler.build_context("how do I style a page", "unknown")

    assert context.recent_messages == []
    assert context.summary is None
    assert context.skill_signals == []
    assert len(context.relevant_chunks) == 1


@pytest.mark.asyncio
async def test_build_context_degrades_on_search_failure(conversation_store, summarizer):
    """Test that a failing search leaves the other parts intact."""
    search = Mock()
    search.search = AsyncMock(side_effect=RuntimeError("index offline"))
    assembler = ContextAssembler(conversation_store, search, summarizer)

    context = await assembler.build_context("how do I style a page", "s1")

    assert context.relevant_chunks == []
    assert len(context.recent_messages) == 2


@pytest.mark.asyncio
async def test_build_context_degrades_on_store_failure(chunk_store, summarizer):
    """Test that a failing conversation store leaves search results intact."""
    store = Mock()
    store.recent.side_effect = RuntimeError("database unavailable")
    assembler = ContextAssembler(store, LexicalSearch(chunk_store), summarizer)

    context = await assembler.build_context("how do I style a page", "s1")

    assert context.recent_messages == []
    assert context.relevant_chunks[0].chunk.key == ("docs", "2")


@pytest.mark.asyncio
async def test_build_context_passes_limits(conversation_store, summarizer):
    """Test that configured limits reach the search strategy."""
    search = Mock()
    search.search = AsyncMock(return_value=[])
    assembler = ContextAssembler(
        conversation_store, search, summarizer, chunk_limit=4, chunk_threshold=0.5
    )

    await assembler.build_context("explain flexbox", "s1")

    search.search.assert_awaited_once_with("explain flexbox", 4, 0.5)
