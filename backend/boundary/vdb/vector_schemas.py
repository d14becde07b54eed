"""
Vector search schemas.

Result types shared by the pgvector and in-process search backends.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class VectorHit(BaseModel):
    """One row returned by a vector search with its cosine similarity."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    row: Any = Field(description="ORM instance (ChunkModel, EntityModel or RelationModel)")
    similarity: float = Field(description="Cosine similarity (0.0-1.0)", ge=0.0, le=1.0)


class VectorQuery(BaseModel):
    """Parameters for a vector search."""

    embedding: list[float] = Field(description="Query embedding vector")
    limit: int = Field(default=10, description="Maximum rows returned", ge=1, le=500)
    similarity_threshold: float = Field(
        default=0.3,
        description="Rows below this similarity are excluded even if fewer than limit remain",
        ge=0.0,
        le=1.0,
    )
    workspace: str | None = Field(default=None, description="Restrict to one workspace")
