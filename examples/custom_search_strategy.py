"""
Custom Search Strategy Example

Demonstrates how to plug a custom relevance strategy into the context
assembler using the RelevanceSearch protocol.
"""

import asyncio
from typing import List, Optional

from casual_coach.context import ContextAssembler
from casual_coach.models import Chunk, Message, ScoredChunk
from casual_coach.search import RelevanceSearch, rank
from casual_coach.storage import InMemoryChunkStore, InMemoryConversationStore
from casual_coach.summarizer import SessionSummarizer


class PhraseSearch:
    """
    Scores a chunk by the fraction of query words it contains.

    Implements RelevanceSearch via duck typing. Scores are in [0, 1].
    """

    def __init__(self, store: InMemoryChunkStore, default_threshold: float = 0.3):
        self.store = store
        self._default_threshold = default_threshold

    @property
    def default_threshold(self) -> float:
        return self._default_threshold

    async def search(
        self, query: str, limit: int = 8, threshold: Optional[float] = None
    ) -> List[ScoredChunk]:
        words = set(query.lower().split())
        if not words or limit < 1:
            return []

        threshold = self._default_threshold if threshold is None else threshold
        results = []
        for chunk in self.store.list_chunks():
            text = chunk.text.lower()
            score = sum(1 for word in words if word in text) / len(words)
            if score >= threshold:
                results.append(ScoredChunk(chunk=chunk, similarity=score))

        return rank(results, limit)


class EchoCompletion:
    """Completion stub so the example runs offline."""

    async def complete(self, system_prompt, user_prompt, temperature=None, max_tokens=None):
        return "Session about centering with flexbox."


async def main():
    chunks = InMemoryChunkStore()
    chunks.upsert_chunks(
        [
            Chunk(source="docs", source_id="flex", text="Center a div with display flex."),
            Chunk(source="docs", source_id="grid", text="Grid places items in rows."),
        ]
    )

    conversations = InMemoryConversationStore()
    conversations.append("demo", Message(role="user", content="My div is not centered"))

    search = PhraseSearch(chunks)
    print(f"Implements RelevanceSearch: {isinstance(search, RelevanceSearch)}")

    assembler = ContextAssembler(
        conversations, search, SessionSummarizer(conversations, EchoCompletion())
    )

    question = "how do I center a div"
    context = await assembler.build_context(question, "demo")
    print(assembler.format_for_prompt(context, question))


if __name__ == "__main__":
    asyncio.run(main())
