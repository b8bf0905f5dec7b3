"""Configuration management."""

import logging
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CoachSettings(BaseSettings):
    """
    Settings for wiring a chat service.

    Read from the environment (``COACH_`` prefix) and an optional ``.env``
    file. Only the factory reads these; the core components take plain
    constructor arguments.
    """

    # Completion
    completion_provider: Literal["openai", "ollama"] = "openai"
    completion_model: str = "gpt-4o-mini"
    completion_base_url: Optional[str] = None
    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("COACH_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    reply_temperature: float = 0.3
    reply_max_tokens: int = 300
    summary_temperature: float = 0.3
    summary_max_tokens: int = 150

    # Embeddings / search
    search_strategy: Literal["lexical", "vector"] = "lexical"
    embedding_model: str = "text-embedding-3-large"
    embedding_dimensions: Optional[int] = None
    lexical_threshold: float = 0.0
    vector_threshold: float = 0.7

    # Storage
    conversation_backend: Literal["memory", "sqlalchemy", "redis"] = "memory"
    chunk_backend: Literal["memory", "sqlalchemy"] = "memory"
    database_url: str = "sqlite:///coach.db"
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0

    # Retrieval / summaries
    recent_message_limit: int = 20
    relevant_chunk_limit: int = 8
    summary_min_messages: int = 4
    summary_trigger_count: int = 6
    chunk_size_hint: int = 1000
    chunk_overlap: float = Field(default=0.15, ge=0.0, lt=1.0)

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="COACH_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def search_threshold(self) -> float:
        """Threshold for the active search strategy."""
        if self.search_strategy == "vector":
            return self.vector_threshold
        return self.lexical_threshold


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
