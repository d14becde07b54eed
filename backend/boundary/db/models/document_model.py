"""
Document ORM model.

Represents one uploaded file with its modality, storage locator and
ingestion lifecycle status.

Dependencies: sqlalchemy, backend.boundary.db.base
System role: Document persistence for ingestion tracking
"""

import enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.boundary.db.base import Base, JSONType, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from backend.boundary.db.models.chunk_model import ChunkModel


class DocumentStatus(str, enum.Enum):
    """
    Document processing lifecycle states.

    PENDING: Document stored, awaiting an ingestion worker
    PROCESSING: Worker is extracting, chunking, and embedding
    PROCESSED: Chunks persisted and searchable
    FAILED: Processing error; error_message field contains details
    """

    PENDING = "pending"
    PROCESSING = "processing"
    PROCESSED = "processed"
    FAILED = "failed"


class Modality(str, enum.Enum):
    """Extractor category resolved from the file extension."""

    TEXT = "text"
    DOCUMENT = "document"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"


class DocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Document ORM model tracking ingestion pipeline state.

    Lifecycle: Upload (PENDING) → worker (PROCESSING) → chunks persisted
    (PROCESSED) or failure (FAILED). Only status, chunk_count and
    error_message change after creation.

    Attributes:
        id: UUID primary key (auto-generated)
        workspace: Scope partitioning documents and the knowledge graph
        name: Original filename (255 char limit)
        file_type: Lower-case extension without the dot (pdf, mp4, ...)
        modality: Extractor category
        byte_size: Size of the original upload
        storage_locator: Blob store key of the original bytes
        status: Current processing state
        chunk_count: Chunks persisted by the last successful ingestion
        error_message: Null unless FAILED (2048 char limit)
        metadata_: Free-form map (duration hints, upload content type)

    Relationships:
        chunks: ChunkModel rows (cascade delete)
    """

    __tablename__ = "documents"

    workspace: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        default="default",
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Original filename",
    )

    file_type: Mapped[str] = mapped_column(String(16), nullable=False)

    modality: Mapped[Modality] = mapped_column(
        Enum(Modality, native_enum=False),
        nullable=False,
    )

    byte_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    storage_locator: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        doc="Blob store key for the raw file",
    )

    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus, native_enum=False),
        nullable=False,
        default=DocumentStatus.PENDING,
    )

    chunk_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    error_message: Mapped[str | None] = mapped_column(
        String(2048),
        nullable=True,
        doc="Error details if processing failed",
    )

    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSONType,
        nullable=False,
        default=dict,
    )

    # Relationships
    chunks: Mapped[list["ChunkModel"]] = relationship(
        "ChunkModel",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
