"""
Entity ORM model.

A deduplicated named concept. Uniqueness is the normalized name within a
workspace, which is what lets repeated extractions across documents merge
into one row.

Dependencies: sqlalchemy, pgvector, backend.boundary.db.base
System role: Knowledge graph node persistence and entity vector index
"""

import enum
from typing import Any

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from backend.boundary.db.base import (
    Base,
    JSONType,
    TimestampMixin,
    UUIDMixin,
    embedding_column,
)


class EntityType(str, enum.Enum):
    """Entity categories the extraction prompt asks for."""

    PERSON = "PERSON"
    ORGANIZATION = "ORGANIZATION"
    LOCATION = "LOCATION"
    EVENT = "EVENT"
    CONCEPT = "CONCEPT"
    TECHNOLOGY = "TECHNOLOGY"
    PRODUCT = "PRODUCT"
    DATE = "DATE"


class EntityModel(Base, UUIDMixin, TimestampMixin):
    """
    Entity ORM model.

    Attributes:
        workspace: Scope of the uniqueness constraint
        entity_name: Canonical display name (first-seen casing)
        normalized_name: Lower-cased, whitespace-collapsed key
        entity_type: EntityType value
        description: Merged description
        embedding: Vector of "{name}: {description}", nullable
        source_chunk_ids: Contributing chunk ids (strings, no duplicates)
    """

    __tablename__ = "entities"
    __table_args__ = (
        UniqueConstraint("workspace", "normalized_name", name="uq_entities_workspace_name"),
    )

    workspace: Mapped[str] = mapped_column(String(128), nullable=False, default="default")

    entity_name: Mapped[str] = mapped_column(String(512), nullable=False)

    normalized_name: Mapped[str] = mapped_column(String(512), nullable=False, index=True)

    entity_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=EntityType.CONCEPT.value,
    )

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    embedding: Mapped[Any] = embedding_column()

    source_chunk_ids: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
