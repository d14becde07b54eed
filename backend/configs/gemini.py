"""
Gemini model configuration settings.

Holds the API key and model identifiers for the content-understanding
service (multimodal generation) and the embedding service.

Dependencies: pydantic, pydantic_settings
System role: Model provider configuration for extraction, embedding and answers
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Google Gemini configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GEMINI_",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str = Field(
        default="",
        description="Google API key (falls back to GOOGLE_API_KEY in the SDKs when empty)",
    )
    model: str = Field(
        default="gemini-2.0-flash",
        description="Model used for document, image, video, audio and entity extraction",
    )
    answer_model: str = Field(
        default="gemini-2.0-flash",
        description="Model used to compose final answers",
    )
    temperature: float = Field(
        default=0.1,
        description="Sampling temperature for extraction calls",
    )
    embedding_model: str = Field(
        default="models/text-embedding-004",
        description="Google embedding model ID (text-embedding-004 supports up to 768 dims)",
    )
    embedding_dimension: int = Field(
        default=768,
        description="Embedding vector dimension; must match the Vector columns",
    )
    embedding_batch_size: int = Field(
        default=100,
        description="Texts per embedding API call",
    )
    file_poll_interval_seconds: float = Field(
        default=2.0,
        description="Polling interval while an uploaded file is being processed",
    )
    file_poll_timeout_seconds: float = Field(
        default=300.0,
        description="Give up waiting for an uploaded file to become ACTIVE after this long",
    )
