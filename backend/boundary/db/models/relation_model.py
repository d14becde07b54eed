"""
Relation ORM model.

A typed, directed edge between two entities. The (source, type, target)
triple is unique; both endpoints are required foreign keys so a dangling
relation cannot be stored.

Dependencies: sqlalchemy, pgvector, backend.boundary.db.base
System role: Knowledge graph edge persistence and relation vector index
"""

import uuid
from typing import Any

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from backend.boundary.db.base import (
    Base,
    JSONType,
    TimestampMixin,
    UUIDMixin,
    embedding_column,
)


class RelationModel(Base, UUIDMixin, TimestampMixin):
    """
    Relation ORM model.

    Attributes:
        workspace: Scope, copied from the endpoints
        source_entity_id: Edge tail (ON DELETE CASCADE)
        target_entity_id: Edge head (ON DELETE CASCADE)
        relation_type: Upper-case label such as WORKS_FOR
        description: Description of the first extraction that produced the edge
        embedding: Vector of "{source} {type} {target}: {description}", nullable
        source_chunk_ids: Contributing chunk ids
    """

    __tablename__ = "relations"
    __table_args__ = (
        UniqueConstraint(
            "source_entity_id",
            "relation_type",
            "target_entity_id",
            name="uq_relations_triple",
        ),
    )

    workspace: Mapped[str] = mapped_column(String(128), nullable=False, default="default")

    source_entity_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("entities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    target_entity_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("entities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    relation_type: Mapped[str] = mapped_column(String(128), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    embedding: Mapped[Any] = embedding_column()

    source_chunk_ids: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
