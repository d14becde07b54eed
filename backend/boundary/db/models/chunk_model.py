"""
Chunk ORM model.

A bounded unit of searchable content derived from one document, with an
optional embedding used by naive retrieval.

Dependencies: sqlalchemy, pgvector, backend.boundary.db.base
System role: Chunk persistence and chunk vector index
"""

import enum
import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import Enum, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.boundary.db.base import (
    Base,
    JSONType,
    TimestampMixin,
    UUIDMixin,
    embedding_column,
)

if TYPE_CHECKING:
    from backend.boundary.db.models.document_model import DocumentModel


class ChunkType(str, enum.Enum):
    """Modality tag of a chunk."""

    TEXT = "text"
    TABLE = "table"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO_SEGMENT = "video_segment"


# Chunk types whose content goes through entity/relation extraction
ENTITY_BEARING_CHUNK_TYPES = frozenset(
    {ChunkType.TEXT, ChunkType.AUDIO, ChunkType.VIDEO_SEGMENT}
)


class ChunkModel(Base, UUIDMixin, TimestampMixin):
    """
    Chunk ORM model.

    Attributes:
        document_id: Owning document (ON DELETE CASCADE)
        workspace: Copied from the document for filtered vector search
        chunk_order_index: Monotonic position within the document
        start_time / end_time: Seconds, audio and video chunks only
        content: Searchable text
        tokens: Estimated token count (4 chars per token)
        chunk_type: Modality tag
        embedding: Nullable vector; null rows are skipped by vector search
        page_idx: Source page, structured documents only
        metadata_: Free-form map
    """

    __tablename__ = "chunks"
    __table_args__ = (
        Index("ix_chunks_document_order", "document_id", "chunk_order_index"),
    )

    document_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    workspace: Mapped[str] = mapped_column(String(128), nullable=False, default="default")

    chunk_order_index: Mapped[int] = mapped_column(Integer, nullable=False)

    start_time: Mapped[float | None] = mapped_column(Float, nullable=True)
    end_time: Mapped[float | None] = mapped_column(Float, nullable=True)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    tokens: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    chunk_type: Mapped[ChunkType] = mapped_column(
        Enum(ChunkType, native_enum=False),
        nullable=False,
        default=ChunkType.TEXT,
    )

    embedding: Mapped[Any] = embedding_column()

    page_idx: Mapped[int | None] = mapped_column(Integer, nullable=True)

    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSONType,
        nullable=False,
        default=dict,
    )

    # Relationships
    document: Mapped["DocumentModel"] = relationship("DocumentModel", back_populates="chunks")
