"""
Retrieval configuration settings.

Controls result counts and the similarity floor applied to every
vector search (chunks, entities, relations).

Dependencies: pydantic, pydantic_settings
System role: Retrieval engine configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrievalSettings(BaseSettings):
    """Retrieval engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    top_k: int = Field(default=10, description="Number of chunks returned by naive search")
    entity_top_k: int = Field(
        default=20,
        description="Number of entities/relations matched in local and global modes",
    )
    max_top_k: int = Field(default=50, description="Upper bound accepted for top_k")
    similarity_threshold: float = Field(
        default=0.3,
        description="Minimum cosine similarity for any returned item (0.0-1.0)",
    )
    default_mode: str = Field(
        default="mix",
        description="Retrieval mode used when a request does not name one",
    )
