"""
Ingestion result model.

Represents the outcome of one document's pass through the pipeline.

Dependencies: pydantic
System role: Return type for IngestionOrchestrator.ingest()
"""

from pydantic import BaseModel, Field


class IngestionResult(BaseModel):
    """Result of document ingestion."""

    success: bool = Field(description="Whether the document reached 'processed'")
    document_id: str = Field(description="Document identifier")
    chunks_created: int = Field(default=0, description="Chunks persisted")
    entities_created: int = Field(default=0, description="Entities created or merged")
    relations_created: int = Field(default=0, description="Relations created or merged")
    error: str | None = Field(default=None, description="Failure message when success is False")
    processing_time_ms: float = Field(default=0.0, description="Total processing time in milliseconds")
