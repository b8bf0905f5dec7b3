"""
Configuration-time wiring.

Every strategy choice (which stores, which search, which providers) is made
here from settings, so no core component has to inspect its environment.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from casual_llm import LLMProvider, ModelConfig, Provider, create_provider
from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from casual_coach.chat_service import ChatService
from casual_coach.completion import CompletionProvider, LLMCompletion
from casual_coach.config import CoachSettings
from casual_coach.context import ContextAssembler
from casual_coach.embeddings import TextEmbedding
from casual_coach.indexing import ChunkIndex
from casual_coach.search import LexicalSearch, RelevanceSearch, VectorSearch
from casual_coach.storage import (
    ChunkStore,
    ConversationStore,
    InMemoryChunkStore,
    InMemoryConversationStore,
)
from casual_coach.summarizer import SessionSummarizer

logger = logging.getLogger(__name__)


@dataclass
class CoachApp:
    """Fully wired components."""

    chat_service: ChatService
    chunk_index: ChunkIndex
    conversations: ConversationStore
    chunk_store: ChunkStore
    search: RelevanceSearch
    summarizer: SessionSummarizer


def create_database_engine(database_url: str) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    # Stores are called from worker threads
    kwargs = {"connect_args": {"check_same_thread": False}}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise each thread sees its own empty database
        kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def build_completion(
    settings: CoachSettings, llm_provider: Optional[LLMProvider] = None
) -> LLMCompletion:
    if llm_provider is None:
        provider_map = {
            "openai": Provider.OPENAI,
            "ollama": Provider.OLLAMA,
        }
        llm_provider = create_provider(
            ModelConfig(
                name=settings.completion_model,
                provider=provider_map[settings.completion_provider],
                base_url=settings.completion_base_url,
                api_key=settings.openai_api_key,
            )
        )

    return LLMCompletion(
        llm_provider,
        model_name=settings.completion_model,
        default_temperature=settings.reply_temperature,
        default_max_tokens=settings.reply_max_tokens,
    )


def build_embedding(settings: CoachSettings) -> TextEmbedding:
    from casual_coach.embeddings.openai_embedding import OpenAIEmbedding

    return OpenAIEmbedding(
        model=settings.embedding_model,
        api_key=settings.openai_api_key,
        dimensions=settings.embedding_dimensions,
    )


def build_conversation_store(
    settings: CoachSettings, engine: Optional[Engine] = None
) -> ConversationStore:
    if settings.conversation_backend == "sqlalchemy":
        from casual_coach.storage.conversations.sqlalchemy import SQLAlchemyConversationStore

        store = SQLAlchemyConversationStore(engine or create_database_engine(settings.database_url))
        store.create_tables()
        return store

    if settings.conversation_backend == "redis":
        from casual_coach.storage.conversations.redis import RedisConversationStore

        return RedisConversationStore(
            host=settings.redis_host, port=settings.redis_port, db=settings.redis_db
        )

    return InMemoryConversationStore()


def build_chunk_store(settings: CoachSettings, engine: Optional[Engine] = None) -> ChunkStore:
    if settings.chunk_backend == "sqlalchemy":
        from casual_coach.storage.chunks.sqlalchemy import SQLAlchemyChunkStore

        store = SQLAlchemyChunkStore(engine or create_database_engine(settings.database_url))
        store.create_tables()
        return store

    return InMemoryChunkStore()


def build_app(
    settings: Optional[CoachSettings] = None,
    llm_provider: Optional[LLMProvider] = None,
    completion: Optional[CompletionProvider] = None,
    embedding: Optional[TextEmbedding] = None,
) -> CoachApp:
    """
    Wire a complete chat backend from settings.

    Args:
        settings: Settings (read from the environment if omitted)
        llm_provider: Optional casual-llm provider to use instead of building one
        completion: Optional completion provider (overrides llm_provider)
        embedding: Optional embedding provider (built from settings for vector search)

    Returns:
        The wired components
    """
    settings = settings or CoachSettings()

    engine = None
    if "sqlalchemy" in (settings.conversation_backend, settings.chunk_backend):
        engine = create_database_engine(settings.database_url)

    conversations = build_conversation_store(settings, engine)
    chunk_store = build_chunk_store(settings, engine)
    completion = completion or build_completion(settings, llm_provider)

    if settings.search_strategy == "vector":
        embedding = embedding or build_embedding(settings)
        search: RelevanceSearch = VectorSearch(
            chunk_store, embedding, default_threshold=settings.vector_threshold
        )
    else:
        search = LexicalSearch(chunk_store, default_threshold=settings.lexical_threshold)

    summarizer = SessionSummarizer(
        conversations,
        completion,
        min_messages=settings.summary_min_messages,
        temperature=settings.summary_temperature,
        max_tokens=settings.summary_max_tokens,
    )
    assembler = ContextAssembler(
        conversations,
        search,
        summarizer,
        recent_limit=settings.recent_message_limit,
        chunk_limit=settings.relevant_chunk_limit,
    )
    chat_service = ChatService(
        conversations,
        assembler,
        completion,
        summarizer,
        summary_trigger_count=settings.summary_trigger_count,
        response_history_limit=settings.recent_message_limit,
        temperature=settings.reply_temperature,
        max_tokens=settings.reply_max_tokens,
    )
    chunk_index = ChunkIndex(
        chunk_store,
        embedding=embedding if settings.search_strategy == "vector" else None,
        max_size_hint=settings.chunk_size_hint,
        overlap_fraction=settings.chunk_overlap,
    )

    logger.info(
        f"Coach wired: conversations={settings.conversation_backend}, "
        f"chunks={settings.chunk_backend}, search={settings.search_strategy}, "
        f"model={settings.completion_model}"
    )

    return CoachApp(
        chat_service=chat_service,
        chunk_index=chunk_index,
        conversations=conversations,
        chunk_store=chunk_store,
        search=search,
        summarizer=summarizer,
    )
