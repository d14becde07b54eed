"""
Base configuration settings.

Application-level values shared by the API process: log level, default
workspace, CORS origins and the bind address used when run directly.
Every value can be overridden from the environment or a .env file.

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

from pydantic import Field
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Top-level application settings (no env prefix)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Root logging level")
    default_workspace: str = Field(
        default="default",
        description="Workspace used when a request does not name one",
    )
    cors_origins: list[str] = Field(default=["*"], description="Origins allowed by the CORS middleware")
    api_host: str = Field(default="0.0.0.0", description="Bind address for `python -m backend.api.main`")
    api_port: int = Field(default=8000, description="Bind port for `python -m backend.api.main`")
