import asyncio
import logging
from typing import Callable, Dict, List, Optional

from casual_coach.completion import CompletionProvider, complete_with_retry
from casual_coach.errors import TransientProviderError
from casual_coach.models import SessionSummary, SkillSignal
from casual_coach.prompts import FALLBACK_SUMMARY, SUMMARY_PROMPT, SUMMARY_SYSTEM_PROMPT
from casual_coach.storage import ConversationStore
from casual_coach.summarizer.analysis import (
    analyze_learning_style,
    analyze_skill_progress,
    extract_topics,
    render_transcript,
)

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[str, BaseException], None]


def log_summary_error(session_id: str, error: BaseException) -> None:
    """Default error observer for detached summarization."""
    logger.error(
        f"Background summarization failed for session {session_id}: "
        f"{type(error).__name__}: {error}"
    )


class SessionSummarizer:
    """
    Condenses a session's message log into a short summary plus structured signals.

    Summaries need at least ``min_messages`` messages; shorter sessions are
    skipped without error. The model-written part falls back to a fixed
    sentence when the completion provider is unavailable.
    """

    def __init__(
        self,
        store: ConversationStore,
        completion: CompletionProvider,
        min_messages: int = 4,
        temperature: float = 0.3,
        max_tokens: int = 150,
        on_error: ErrorCallback = log_summary_error,
    ):
        """
        Args:
            store: Conversation store holding the sessions
            completion: Provider used to write the summary text
            min_messages: Minimum log length before a summary is produced (default: 4)
            temperature: Completion temperature (default: 0.3)
            max_tokens: Completion token cap (default: 150)
            on_error: Callback observing failures of detached summaries
        """
        self.store = store
        self.completion = completion
        self.min_messages = min_messages
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.on_error = on_error
        self._in_flight: Dict[str, asyncio.Task] = {}

    async def _generate_text(self, transcript: str) -> str:
        try:
            return await complete_with_retry(
                self.completion,
                SUMMARY_SYSTEM_PROMPT,
                SUMMARY_PROMPT.format(conversation=transcript),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except TransientProviderError as e:
            logger.warning(f"Summary completion unavailable, using fallback: {e}")
            return FALLBACK_SUMMARY

    async def summarize(self, session_id: str) -> Optional[SessionSummary]:
        """
        Generate and store a summary for a session.

        Args:
            session_id: The session ID

        Returns:
            The stored summary, or None if the session is too short

        Raises:
            DataIntegrityError: If the summary could not be stored
        """
        messages = await asyncio.to_thread(self.store.messages, session_id)
        if len(messages) < self.min_messages:
            logger.debug(
                f"Skipping summary for session {session_id} "
                f"({len(messages)} < {self.min_messages} messages)"
            )
            return None

        text = await self._generate_text(render_transcript(messages))

        summary = SessionSummary(
            session_id=session_id,
            summary=text,
            topics=extract_topics(messages),
            skill_progress=analyze_skill_progress(messages),
            learning_style=analyze_learning_style(messages),
        )
        await asyncio.to_thread(self.store.add_summary, summary)

        logger.info(
            f"Generated summary for session {session_id} "
            f"(messages={len(messages)}, topics={len(summary.topics)})"
        )
        return summary

    async def get_latest(self, session_id: str) -> Optional[str]:
        """Get the rendered text of the latest summary for a session."""
        summary = await asyncio.to_thread(self.store.latest_summary, session_id)
        return summary.render() if summary else None

    async def skill_signals(self, session_id: str) -> List[SkillSignal]:
        """Recompute skill signals from the session's message log."""
        messages = await asyncio.to_thread(self.store.messages, session_id)
        return analyze_skill_progress(messages)

    def is_running(self, session_id: str) -> bool:
        return session_id in self._in_flight

    def schedule(self, session_id: str) -> Optional[asyncio.Task]:
        """
        Start summarization as a detached task.

        At most one summarization runs per session; if one is already in
        flight this returns None. Failures are passed to ``on_error``.
        Must be called from a running event loop.
        """
        if session_id in self._in_flight:
            logger.debug(f"Summary already in flight for session {session_id}")
            return None

        task = asyncio.create_task(self.summarize(session_id))
        self._in_flight[session_id] = task
        task.add_done_callback(lambda t: self._finished(session_id, t))
        return task

    def _finished(self, session_id: str, task: asyncio.Task) -> None:
        self._in_flight.pop(session_id, None)

        if task.cancelled():
            logger.warning(f"Summarization for session {session_id} was cancelled")
            return

        error = task.exception()
        if error is not None:
            try:
                self.on_error(session_id, error)
            except Exception as callback_error:
                logger.error(f"Summary error callback failed: {callback_error}")

    async def drain(self) -> None:
        """Wait for every in-flight summarization to finish (used on shutdown)."""
        tasks = list(self._in_flight.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
