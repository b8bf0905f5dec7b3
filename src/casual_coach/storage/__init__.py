"""
Storage protocols for chunks and conversations.

Provides protocol definitions for storage backends. Implementations can use
various databases (PostgreSQL, SQLite, Redis, in-memory, etc.) as long as they
satisfy the protocol interface.
"""

from casual_coach.storage.protocols import ChunkStore, ConversationStore

__all__ = [
    "ChunkStore",
    "ConversationStore",
]

# Chunk storage implementations
from casual_coach.storage.chunks.memory import InMemoryChunkStore  # noqa: E402

__all__.append("InMemoryChunkStore")

try:
    from casual_coach.storage.chunks.sqlalchemy import SQLAlchemyChunkStore  # noqa: F401

    __all__.append("SQLAlchemyChunkStore")
except ImportError:
    pass

# Conversation storage implementations
from casual_coach.storage.conversations.memory import InMemoryConversationStore  # noqa: E402

__all__.append("InMemoryConversationStore")

try:
    from casual_coach.storage.conversations.sqlalchemy import (  # noqa: F401
        SQLAlchemyConversationStore,
    )

    __all__.append("SQLAlchemyConversationStore")
except ImportError:
    pass

try:
    from casual_coach.storage.conversations.redis import RedisConversationStore  # noqa: F401

    __all__.append("RedisConversationStore")
except ImportError:
    pass
