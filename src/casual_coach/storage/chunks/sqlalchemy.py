"""
SQLAlchemy-based chunk storage implementation.

Works with any SQLAlchemy-compatible database (PostgreSQL, SQLite, MySQL,
etc.). Vectors are stored as JSON text so no vector extension is required.
"""

import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, DateTime, Engine, Integer, String, Text, UniqueConstraint
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base

from casual_coach.errors import DataIntegrityError
from casual_coach.models import Chunk

logger = logging.getLogger(__name__)

Base = declarative_base()


class ChunkDB(Base):
    """SQLAlchemy model for chunk storage."""

    __tablename__ = "chunks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source = Column(String, nullable=False, index=True)
    source_id = Column(String, nullable=False)
    text = Column(Text, nullable=False)
    vector_json = Column(Text, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (UniqueConstraint("source", "source_id", name="uq_chunks_source_key"),)

    def to_chunk(self) -> Chunk:
        """Convert database model to Chunk."""
        return Chunk(
            source=self.source,
            source_id=self.source_id,
            text=self.text,
            vector=json.loads(self.vector_json) if self.vector_json else None,
        )


class SQLAlchemyChunkStore:
    """
    SQLAlchemy-based chunk storage.

    Each upsert call runs in a single transaction, so a failed batch leaves
    nothing written.

    Example:
        from sqlalchemy import create_engine
        engine = create_engine("sqlite:///chunks.db")
        store = SQLAlchemyChunkStore(engine)
        store.create_tables()
    """

    def __init__(self, engine: Engine):
        """
        Initialize the SQLAlchemy chunk store.

        Args:
            engine: SQLAlchemy engine for database connection
        """
        self.engine = engine
        logger.info(f"SQLAlchemyChunkStore initialized (engine={engine.url})")

    @contextmanager
    def _session(self):
        """Context manager for database sessions with automatic commit/rollback."""
        session = Session(self.engine)
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error: {e}")
            raise DataIntegrityError(f"Chunk store operation failed: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_tables(self):
        """Create database tables if they don't exist."""
        Base.metadata.create_all(self.engine)
        logger.info("Chunk tables created/verified")

    def upsert_chunks(self, chunks: List[Chunk]) -> int:
        """Insert or replace chunks in one transaction."""
        if not chunks:
            return 0

        with self._session() as session:
            self._write_chunks(session, chunks)

        logger.debug(f"Upserted {len(chunks)} chunks")
        return len(chunks)

    def _write_chunks(self, session: Session, chunks: List[Chunk]) -> None:
        for chunk in chunks:
            vector_json = json.dumps(chunk.vector) if chunk.vector is not None else None
            existing = (
                session.query(ChunkDB)
                .filter(ChunkDB.source == chunk.source, ChunkDB.source_id == chunk.source_id)
                .first()
            )

            if existing:
                existing.text = chunk.text
                existing.vector_json = vector_json
                existing.updated_at = datetime.now()
            else:
                session.add(
                    ChunkDB(
                        source=chunk.source,
                        source_id=chunk.source_id,
                        text=chunk.text,
                        vector_json=vector_json,
                    )
                )
            # Flush per row so repeated keys within one batch update instead of colliding
            session.flush()

    def replace_source(self, source: str, chunks: List[Chunk]) -> int:
        """Swap every chunk of one source for a new set in one transaction."""
        with self._session() as session:
            session.query(ChunkDB).filter(ChunkDB.source == source).delete()
            self._write_chunks(session, chunks)

        logger.info(f"Replaced source={source} with {len(chunks)} chunks")
        return len(chunks)

    def get_chunk(self, source: str, source_id: str) -> Optional[Chunk]:
        """Retrieve a chunk by its key."""
        with self._session() as session:
            db_chunk = (
                session.query(ChunkDB)
                .filter(ChunkDB.source == source, ChunkDB.source_id == source_id)
                .first()
            )
            return db_chunk.to_chunk() if db_chunk else None

    def list_chunks(self, source: Optional[str] = None) -> List[Chunk]:
        """List stored chunks, ordered by key."""
        with self._session() as session:
            query = session.query(ChunkDB)
            if source:
                query = query.filter(ChunkDB.source == source)
            query = query.order_by(ChunkDB.source, ChunkDB.source_id)
            return [db_chunk.to_chunk() for db_chunk in query.all()]

    def delete_source(self, source: str) -> int:
        """Delete every chunk from one source."""
        with self._session() as session:
            count = session.query(ChunkDB).filter(ChunkDB.source == source).delete()

        logger.info(f"Deleted {count} chunks for source={source}")
        return count

    def count(self) -> int:
        """Get the number of stored chunks."""
        with self._session() as session:
            return session.query(ChunkDB).count()
