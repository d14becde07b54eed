"""
Chunk domain model for the ingestion pipeline.

A chunk as produced by segmentation, before it is persisted. Embeddings
are attached by the embedding task; a missing embedding stays None.

Dependencies: pydantic
System role: Data structure for document chunks in ingestion pipeline
"""

from pydantic import BaseModel, Field

from backend.boundary.db.models import ChunkType


class Chunk(BaseModel):
    """Document chunk with optional embedding vector."""

    chunk_order_index: int = Field(ge=0, description="Position within the document")
    content: str = Field(description="Chunk text content")
    tokens: int = Field(ge=0, description="Estimated token count")
    chunk_type: ChunkType = Field(default=ChunkType.TEXT, description="Origin of the content")
    start_time: float | None = Field(default=None, description="Segment start in seconds (audio/video)")
    end_time: float | None = Field(default=None, description="Segment end in seconds (audio/video)")
    page_idx: int | None = Field(default=None, description="Source page (structured documents)")
    metadata: dict = Field(default_factory=dict, description="Chunk metadata")
    embedding: list[float] | None = Field(default=None, description="Embedding vector")
