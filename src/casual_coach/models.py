import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

SUMMARY_MARKER = "SESSION SUMMARY:"


class Chunk(BaseModel):
    """A bounded fragment of a source document, keyed by (source, source_id)."""

    source: str
    source_id: str
    text: str
    vector: Optional[List[float]] = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.source, self.source_id)


class ScoredChunk(BaseModel):
    """A chunk returned by a relevance search along with its strategy-specific score."""

    chunk: Chunk
    similarity: float


class IngestRecord(BaseModel):
    """One raw text record produced by a content connector."""

    source: str
    source_id: str
    text: str


class Session(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = Field(default_factory=datetime.now)


class Message(BaseModel):
    """A single conversation turn"""

    session_id: str = ""
    role: Literal["user", "assistant", "system"]
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)
    seq: Optional[int] = Field(
        default=None, description="Store-assigned insertion sequence (tie-breaker for ordering)"
    )


class SkillSignal(BaseModel):
    skill: str
    score_delta: int = Field(..., ge=-100, le=100)
    evidence: str = ""


class LearningStyle(BaseModel):
    preferred_format: Literal["step-by-step", "examples", "concepts", "mixed"] = "mixed"
    pace: Literal["slow", "medium", "fast"] = "medium"
    feedback: Literal["detailed", "brief", "mixed"] = "mixed"
    notes: List[str] = Field(default_factory=list)


class SessionSummary(BaseModel):
    """Condensed view of a session, produced by the summarizer"""

    session_id: str
    summary: str
    topics: List[str] = Field(default_factory=list)
    skill_progress: List[SkillSignal] = Field(default_factory=list)
    learning_style: LearningStyle = Field(default_factory=LearningStyle)
    created_at: datetime = Field(default_factory=datetime.now)

    def render(self) -> str:
        """Render the summary as text, prefixed with the summary marker."""
        lines = [f"{SUMMARY_MARKER} {self.summary}"]
        if self.topics:
            lines.append(f"TOPICS: {', '.join(self.topics)}")
        lines.append(f"LEARNING STYLE: {self.learning_style.model_dump_json()}")
        return "\n".join(lines)


class RetrievalContext(BaseModel):
    """Context gathered for a single chat turn. Never persisted."""

    recent_messages: List[Message] = Field(default_factory=list)
    relevant_chunks: List[ScoredChunk] = Field(default_factory=list)
    summary: Optional[str] = None
    skill_signals: List[SkillSignal] = Field(default_factory=list)


class ChatRequest(BaseModel):
    message: str = ""
    session_id: Optional[str] = None


class SessionInfo(BaseModel):
    created_at: datetime
    message_count: int


class ChatResponse(BaseModel):
    session_id: str
    assistant_reply: str
    recent_messages: List[Message]
    session_info: SessionInfo
    used_fallback: bool = False
