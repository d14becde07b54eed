"""
Configuration settings for the ingestion pipeline.

Provides environment-based configuration for segmentation, chunk persistence,
media segmentation, entity extraction and worker pool sizing.

Dependencies: pydantic, pydantic_settings
System role: Centralized pipeline configuration
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IngestionSettings(BaseSettings):
    """Settings for the document ingestion pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    # Segmentation settings
    chunk_size_tokens: int = Field(
        default=800,
        description="Maximum chunk size in estimated tokens (4 chars per token)",
    )
    chunk_overlap_tokens: int = Field(
        default=100,
        description="Trailing tokens of a closed chunk repeated at the start of the next",
    )

    # Persistence settings
    chunk_insert_batch_size: int = Field(
        default=100,
        description="Chunks written per database round trip",
    )

    # Media settings
    video_segment_seconds: int = Field(
        default=30,
        description="Window length for fixed-interval video segmentation",
    )
    default_media_duration_seconds: int = Field(
        default=300,
        description="Assumed duration when none can be read from the model response",
    )

    # Entity extraction settings
    enable_entity_extraction: bool = Field(
        default=True,
        description="Run entity/relation extraction after chunks are persisted",
    )
    entity_extraction_concurrency: int = Field(
        default=5,
        description="Concurrent per-chunk extraction calls",
    )
    min_entity_chunk_chars: int = Field(
        default=50,
        description="Chunks shorter than this are skipped by entity extraction",
    )

    # Execution settings
    step_timeout_seconds: float = Field(
        default=600.0,
        description="Timeout applied to each pipeline step",
    )
    ingestion_workers: int = Field(
        default=2,
        description="Concurrent ingestion jobs drained from the queue",
    )
    queue_max_size: int = Field(
        default=1000,
        description="Maximum pending ingestion jobs before submit blocks",
    )


@lru_cache
def get_ingestion_settings() -> IngestionSettings:
    """
    Get cached ingestion settings instance.

    Returns:
        IngestionSettings: Singleton settings loaded from environment
    """
    return IngestionSettings()
