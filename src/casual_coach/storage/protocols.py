"""
Storage protocol definitions for chunks and conversations.

These protocols define the interface that storage implementations must provide.
They are implementation-agnostic and can be backed by various databases
(PostgreSQL, SQLite, Redis, in-memory, etc.).
"""

from typing import List, Optional, Protocol

from casual_coach.models import Chunk, Message, Session, SessionSummary


class ChunkStore(Protocol):
    """
    Protocol for reference-document chunk storage.

    Chunks are keyed by (source, source_id). Writing a chunk whose key already
    exists replaces its text and vector.
    """

    def upsert_chunks(self, chunks: List[Chunk]) -> int:
        """
        Insert or replace chunks.

        The whole batch is written or nothing is.

        Args:
            chunks: Chunks to write (vectors optional)

        Returns:
            Number of chunks written
        """
        ...

    def get_chunk(self, source: str, source_id: str) -> Optional[Chunk]:
        """
        Retrieve a chunk by its key.

        Returns:
            The chunk if found, None otherwise
        """
        ...

    def list_chunks(self, source: Optional[str] = None) -> List[Chunk]:
        """
        List stored chunks, ordered by (source, source_id).

        Args:
            source: Optional source filter

        Returns:
            List of chunks
        """
        ...

    def delete_source(self, source: str) -> int:
        """
        Delete every chunk from one source.

        Returns:
            Number of chunks deleted
        """
        ...

    def replace_source(self, source: str, chunks: List[Chunk]) -> int:
        """
        Swap every chunk of one source for a new set.

        The delete and the write are atomic: on failure the previous
        chunks of the source are still stored.

        Returns:
            Number of chunks written
        """
        ...

    def count(self) -> int:
        """Get the number of stored chunks."""
        ...


class ConversationStore(Protocol):
    """
    Protocol for conversation history storage.

    Messages are append-only and ordered by insertion. Each appended message
    gets a monotonically increasing ``seq`` that breaks timestamp ties.
    Summaries are kept alongside the log, one record per generated summary.
    """

    def create_session(self, session_id: Optional[str] = None) -> Session:
        """
        Create a session (or return the existing one with this ID).

        Args:
            session_id: Optional ID to use (a UUID is generated if omitted)

        Returns:
            The session
        """
        ...

    def get_session(self, session_id: str) -> Optional[Session]:
        """
        Retrieve a session by ID.

        Returns:
            The session if found, None otherwise
        """
        ...

    def append(self, session_id: str, message: Message) -> Message:
        """
        Append a message to a session, creating the session if needed.

        Args:
            session_id: The session ID
            message: Message to append

        Returns:
            The stored message with session_id and seq assigned

        Raises:
            DataIntegrityError: If the message could not be stored
        """
        ...

    def recent(self, session_id: str, limit: int = 20) -> List[Message]:
        """
        Get the most recent messages for a session.

        Args:
            session_id: The session ID
            limit: Maximum number of messages to return (default: 20)

        Returns:
            List of messages, oldest first
        """
        ...

    def messages(self, session_id: str) -> List[Message]:
        """Get the full message log for a session, oldest first."""
        ...

    def count(self, session_id: str) -> int:
        """Get the number of messages stored for a session."""
        ...

    def delete_session(self, session_id: str) -> bool:
        """
        Delete a session with its messages and summaries.

        Returns:
            True if the session existed, False otherwise
        """
        ...

    def add_summary(self, summary: SessionSummary) -> None:
        """
        Store a generated session summary.

        Raises:
            DataIntegrityError: If the summary could not be stored
        """
        ...

    def latest_summary(self, session_id: str) -> Optional[SessionSummary]:
        """
        Get the most recently created summary for a session.

        Returns:
            The summary if one exists, None otherwise
        """
        ...
