"""
Blob storage configuration.

Selects where original uploaded bytes live: a local directory for
development or an S3 bucket for deployed environments.

Dependencies: pydantic_settings
System role: Blob store configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Settings for raw document storage."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    backend: str = Field(
        default="local",
        description="Blob store type: 'local' for a directory, 's3' for a bucket",
    )
    local_root: str = Field(
        default="./data/uploads",
        description="Root directory for the local blob store",
    )
    bucket: str = Field(
        default="multimodal-rag-documents",
        description="S3 bucket for raw document storage",
    )
    region: str = Field(
        default="us-east-1",
        description="AWS region for S3 bucket",
    )
    max_file_size_mb: int = Field(
        default=100,
        description="Reject uploads larger than this many megabytes",
    )
