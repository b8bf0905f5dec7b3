"""
Redis conversation storage implementation.

Provides a Redis-backed store for session message logs and summaries,
suitable for production deployments with multiple replicas.
"""

import logging
from typing import List, Optional

from casual_coach.errors import DataIntegrityError
from casual_coach.models import Message, Session, SessionSummary

try:
    import redis
except ImportError:
    redis = None  # type: ignore

logger = logging.getLogger(__name__)


def _message_member(message: Message) -> str:
    # Members with equal scores sort lexicographically, so a zero-padded seq
    # prefix breaks timestamp ties in arrival order
    return f"{message.seq:020d}:{message.model_dump_json()}"


class RedisConversationStore:
    """
    Redis implementation of the ConversationStore protocol.

    Each session is a hash (metadata), a sorted set of JSON messages scored
    by timestamp and a list of JSON summaries. Sequence numbers come from a
    single INCR counter and break timestamp ties, so messages read back in
    (timestamp, seq) order like the other backends.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        key_prefix: str = "coach:",
        client=None,
    ):
        """
        Initialize the Redis store.

        Args:
            host: Redis host
            port: Redis port
            db: Redis database number
            key_prefix: Prefix for Redis keys (default: "coach:")
            client: Optional pre-built Redis client (host/port/db are ignored)
        """
        if client is None:
            if redis is None:
                raise ImportError(
                    "redis package is required for RedisConversationStore. "
                    "Install with: pip install casual-coach[redis]"
                )
            client = redis.Redis(host=host, port=port, db=db, decode_responses=True)

        self.client = client
        self._key_prefix = key_prefix

        # Test connection
        try:
            self.client.ping()
            logger.info(f"RedisConversationStore initialized (host={host}:{port}, db={db})")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    def _session_key(self, session_id: str) -> str:
        return f"{self._key_prefix}session:{session_id}"

    def _messages_key(self, session_id: str) -> str:
        return f"{self._key_prefix}messages:{session_id}"

    def _summaries_key(self, session_id: str) -> str:
        return f"{self._key_prefix}summaries:{session_id}"

    def _seq_key(self) -> str:
        return f"{self._key_prefix}seq"

    def create_session(self, session_id: Optional[str] = None) -> Session:
        """Create a session, or return the existing one."""
        session = Session(id=session_id) if session_id else Session()
        key = self._session_key(session.id)

        try:
            self.client.hsetnx(key, "created_at", session.created_at.isoformat())
            created_at = self.client.hget(key, "created_at")
        except Exception as e:
            logger.error(f"Failed to create session {session.id}: {e}")
            raise DataIntegrityError(f"Failed to create session: {e}", "create_session") from e

        return Session.model_validate({"id": session.id, "created_at": created_at})

    def get_session(self, session_id: str) -> Optional[Session]:
        """Retrieve a session by ID."""
        created_at = self.client.hget(self._session_key(session_id), "created_at")
        if created_at is None:
            return None
        return Session.model_validate({"id": session_id, "created_at": created_at})

    def append(self, session_id: str, message: Message) -> Message:
        """Append a message to a session."""
        try:
            seq = self.client.incr(self._seq_key())
            stored = message.model_copy(update={"session_id": session_id, "seq": seq})

            pipeline = self.client.pipeline()
            pipeline.hsetnx(
                self._session_key(session_id), "created_at", stored.timestamp.isoformat()
            )
            pipeline.zadd(
                self._messages_key(session_id),
                {_message_member(stored): stored.timestamp.timestamp()},
            )
            pipeline.execute()
        except Exception as e:
            logger.error(f"Failed to append message to session {session_id}: {e}")
            raise DataIntegrityError(f"Failed to append message: {e}", "append") from e

        logger.debug(f"Appended {stored.role} message to session {session_id} (seq={seq})")
        return stored

    def _load(self, members) -> List[Message]:
        messages = []
        for member in members:
            try:
                _, raw = member.split(":", 1)
                messages.append(Message.model_validate_json(raw))
            except Exception as e:
                logger.warning(f"Failed to deserialize message: {e}")
                continue
        return messages

    def recent(self, session_id: str, limit: int = 20) -> List[Message]:
        """Get the most recent messages, oldest first."""
        if limit < 1:
            return []

        return self._load(self.client.zrange(self._messages_key(session_id), -limit, -1))

    def messages(self, session_id: str) -> List[Message]:
        """Get the full message log, oldest first."""
        return self._load(self.client.zrange(self._messages_key(session_id), 0, -1))

    def count(self, session_id: str) -> int:
        """Get the number of messages stored for a session."""
        return self.client.zcard(self._messages_key(session_id))

    def delete_session(self, session_id: str) -> bool:
        """Delete a session and everything attached to it."""
        deleted = self.client.delete(
            self._session_key(session_id),
            self._messages_key(session_id),
            self._summaries_key(session_id),
        )

        if deleted:
            logger.info(f"Deleted session {session_id}")
        return bool(deleted)

    def add_summary(self, summary: SessionSummary) -> None:
        """Store a generated session summary."""
        try:
            self.client.rpush(self._summaries_key(summary.session_id), summary.model_dump_json())
        except Exception as e:
            logger.error(f"Failed to store summary for session {summary.session_id}: {e}")
            raise DataIntegrityError(f"Failed to store summary: {e}", "add_summary") from e

        logger.debug(f"Stored summary for session {summary.session_id}")

    def latest_summary(self, session_id: str) -> Optional[SessionSummary]:
        """Get the most recently created summary."""
        raw = self.client.lindex(self._summaries_key(session_id), -1)
        if raw is None:
            return None
        return SessionSummary.model_validate_json(raw)
