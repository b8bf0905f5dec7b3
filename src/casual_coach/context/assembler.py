"""
Context assembly for chat turns.

Gathers recent history, the latest session summary, relevant reference
chunks and skill signals concurrently, then renders them into one prompt.
Every lookup is read-only; a failed lookup contributes an empty value
instead of failing the turn.
"""

import asyncio
import logging
from typing import Awaitable, List, Optional, TypeVar

from casual_coach.models import Message, RetrievalContext, ScoredChunk, SkillSignal
from casual_coach.search import RelevanceSearch
from casual_coach.storage import ConversationStore
from casual_coach.summarizer import SessionSummarizer

logger = logging.getLogger(__name__)

T = TypeVar("T")

ENRICHMENT_TRIGGERS = (
    "how",
    "what",
    "why",
    "when",
    "where",
    "explain",
    "help",
    "problem",
    "issue",
    "error",
    "debug",
    "fix",
    "center",
    "layout",
    "style",
    "function",
    "variable",
    "element",
)

PROMPT_RECENT_MESSAGES = 6
PROMPT_RELEVANT_CHUNKS = 3


def needs_enrichment(user_message: str) -> bool:
    """Decide whether a message is worth full context assembly."""
    message = user_message.lower()
    return any(trigger in message for trigger in ENRICHMENT_TRIGGERS)


def format_for_prompt(context: RetrievalContext, user_message: str) -> str:
    """
    Render a retrieval context and the current question as one prompt.

    Sections appear in a fixed order (summary, skill progress, recent
    conversation, learning materials, current question), separated by blank
    lines. Empty sections are left out.
    """
    parts: List[str] = []

    if context.summary:
        parts.append(f"CONVERSATION SUMMARY: {context.summary}")

    if context.skill_signals:
        skills = ", ".join(
            f"{signal.skill}: {signal.score_delta:+d} ({signal.evidence or 'no notes'})"
            for signal in context.skill_signals
        )
        parts.append(f"SKILL PROGRESS: {skills}")

    if context.recent_messages:
        recent = "\n".join(
            f"{message.role}: {message.content}"
            for message in context.recent_messages[-PROMPT_RECENT_MESSAGES:]
        )
        parts.append(f"RECENT CONVERSATION:\n{recent}")

    if context.relevant_chunks:
        docs = "\n\n".join(
            f"{result.chunk.source}: {result.chunk.text}"
            for result in context.relevant_chunks[:PROMPT_RELEVANT_CHUNKS]
        )
        parts.append(f"RELEVANT LEARNING MATERIALS:\n{docs}")

    parts.append(f"CURRENT QUESTION: {user_message}")

    return "\n\n".join(parts)


class ContextAssembler:
    """
    Builds the retrieval context for a chat turn.

    Args:
        conversations: Conversation store for recent history
        search: Relevance search strategy for reference chunks
        summarizer: Session summarizer (latest summary and skill signals)
        recent_limit: Recent messages to fetch (default: 20)
        chunk_limit: Relevant chunks to fetch (default: 8)
        chunk_threshold: Search threshold (None = the strategy's own default)
    """

    def __init__(
        self,
        conversations: ConversationStore,
        search: RelevanceSearch,
        summarizer: SessionSummarizer,
        recent_limit: int = 20,
        chunk_limit: int = 8,
        chunk_threshold: Optional[float] = None,
    ):
        self.conversations = conversations
        self.search = search
        self.summarizer = summarizer
        self.recent_limit = recent_limit
        self.chunk_limit = chunk_limit
        self.chunk_threshold = chunk_threshold

    async def _lookup(self, name: str, awaitable: Awaitable[T], default: T) -> T:
        try:
            return await awaitable
        except Exception as e:
            logger.warning(f"Context lookup '{name}' failed: {type(e).__name__}: {e}")
            return default

    async def _recent_messages(self, session_id: str) -> List[Message]:
        return await asyncio.to_thread(self.conversations.recent, session_id, self.recent_limit)

    async def _relevant_chunks(self, user_message: str) -> List[ScoredChunk]:
        return await self.search.search(user_message, self.chunk_limit, self.chunk_threshold)

    async def _skill_signals(self, session_id: str) -> List[SkillSignal]:
        return await self.summarizer.skill_signals(session_id)

    async def build_context(self, user_message: str, session_id: str) -> RetrievalContext:
        """
        Gather all context for a turn concurrently.

        Never raises for lookup failures; cancellation of the calling task
        propagates to the in-flight lookups.
        """
        try:
            recent, chunks, summary, signals = await asyncio.gather(
                self._lookup("recent_messages", self._recent_messages(session_id), []),
                self._lookup("relevant_chunks", self._relevant_chunks(user_message), []),
                self._lookup("summary", self.summarizer.get_latest(session_id), None),
                self._lookup("skill_signals", self._skill_signals(session_id), []),
            )
        except Exception as e:
            logger.error(f"Context assembly failed: {type(e).__name__}: {e}")
            return RetrievalContext()

        logger.debug(
            f"Built context for session {session_id}: messages={len(recent)}, "
            f"chunks={len(chunks)}, summary={summary is not None}, skills={len(signals)}"
        )
        return RetrievalContext(
            recent_messages=recent,
            relevant_chunks=chunks,
            summary=summary,
            skill_signals=signals,
        )

    def needs_enrichment(self, user_message: str) -> bool:
        return needs_enrichment(user_message)

    def format_for_prompt(self, context: RetrievalContext, user_message: str) -> str:
        return format_for_prompt(context, user_message)
