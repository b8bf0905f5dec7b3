"""
In-memory conversation storage implementation.

Provides a simple in-memory store for session message logs and summaries,
suitable for testing and single-instance deployments. For durability use
the SQLAlchemy or Redis implementation instead.
"""

import bisect
import itertools
import logging
import threading
from typing import Dict, List, Optional

from casual_coach.models import Message, Session, SessionSummary

logger = logging.getLogger(__name__)


def _order_key(message: Message):
    return (message.timestamp, message.seq)


class InMemoryConversationStore:
    """
    In-memory implementation of the ConversationStore protocol.

    Message logs are kept sorted by (timestamp, seq). A single lock guards
    writes, and a process-wide counter hands out sequence numbers.
    Data is lost on restart.
    """

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._messages: Dict[str, List[Message]] = {}
        self._summaries: Dict[str, List[SessionSummary]] = {}
        self._seq = itertools.count(1)
        self._lock = threading.Lock()

        logger.info("InMemoryConversationStore initialized")

    def create_session(self, session_id: Optional[str] = None) -> Session:
        """Create a session, or return the existing one."""
        with self._lock:
            return self._ensure_session(session_id)

    def _ensure_session(self, session_id: Optional[str]) -> Session:
        if session_id and session_id in self._sessions:
            return self._sessions[session_id]

        session = Session(id=session_id) if session_id else Session()
        self._sessions[session.id] = session
        self._messages[session.id] = []
        logger.debug(f"Created session {session.id}")
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        """Retrieve a session by ID."""
        return self._sessions.get(session_id)

    def append(self, session_id: str, message: Message) -> Message:
        """Append a message to a session."""
        with self._lock:
            self._ensure_session(session_id)
            stored = message.model_copy(update={"session_id": session_id, "seq": next(self._seq)})
            bisect.insort(self._messages[session_id], stored, key=_order_key)

        logger.debug(
            f"Appended {stored.role} message to session {session_id} (seq={stored.seq})"
        )
        return stored

    def recent(self, session_id: str, limit: int = 20) -> List[Message]:
        """Get the most recent messages, oldest first."""
        if limit < 1 or session_id not in self._messages:
            return []

        with self._lock:
            return list(self._messages[session_id][-limit:])

    def messages(self, session_id: str) -> List[Message]:
        """Get the full message log, oldest first."""
        with self._lock:
            return list(self._messages.get(session_id, []))

    def count(self, session_id: str) -> int:
        """Get the number of messages stored for a session."""
        return len(self._messages.get(session_id, []))

    def delete_session(self, session_id: str) -> bool:
        """Delete a session and everything attached to it."""
        with self._lock:
            if session_id not in self._sessions:
                return False

            count = len(self._messages.pop(session_id, []))
            self._summaries.pop(session_id, None)
            del self._sessions[session_id]

        logger.info(f"Deleted session {session_id} ({count} messages)")
        return True

    def add_summary(self, summary: SessionSummary) -> None:
        """Store a generated session summary."""
        with self._lock:
            self._ensure_session(summary.session_id)
            self._summaries.setdefault(summary.session_id, []).append(summary)

        logger.debug(f"Stored summary for session {summary.session_id}")

    def latest_summary(self, session_id: str) -> Optional[SessionSummary]:
        """Get the most recently created summary."""
        summaries = self._summaries.get(session_id)
        if not summaries:
            return None
        return summaries[-1]

    def clear(self):
        """Clear ALL sessions from the store."""
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
            self._messages.clear()
            self._summaries.clear()
        logger.info(f"Cleared all sessions ({count} total)")
