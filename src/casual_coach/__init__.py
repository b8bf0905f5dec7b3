"""
casual-coach: Retrieval-augmented chat backend for a coding coach.

Core components:
- chunking: Sentence-based, overlapping text chunking
- storage: Protocols and backends for chunks and conversations
- search: Pluggable relevance search (lexical BM25, vector cosine)
- summarizer: Session summaries with skill and learning-style signals
- context: Context assembly and prompt rendering
- chat_service: One chat turn end to end
"""

__version__ = "0.1.0"

from casual_coach.chat_service import ChatService
from casual_coach.context import ContextAssembler
from casual_coach.errors import (
    CoachError,
    DataIntegrityError,
    InputValidationError,
    TransientProviderError,
)
from casual_coach.indexing import ChunkIndex
from casual_coach.models import (
    ChatRequest,
    ChatResponse,
    Chunk,
    IngestRecord,
    Message,
    RetrievalContext,
    ScoredChunk,
    Session,
    SessionSummary,
    SkillSignal,
)
from casual_coach.summarizer import SessionSummarizer

__all__ = [
    "__version__",
    # Models
    "Chunk",
    "ScoredChunk",
    "IngestRecord",
    "Message",
    "Session",
    "SessionSummary",
    "SkillSignal",
    "RetrievalContext",
    "ChatRequest",
    "ChatResponse",
    # Errors
    "CoachError",
    "TransientProviderError",
    "DataIntegrityError",
    "InputValidationError",
    # Services
    "ChunkIndex",
    "SessionSummarizer",
    "ContextAssembler",
    "ChatService",
]
