"""
Observability configuration settings.

Settings for logging format and HTTP request logging.

Dependencies: pydantic_settings
System role: Observability configuration for logging
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class ObservabilitySettings(BaseSettings):
    """Observability configuration for logging."""

    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Format string for the root log handler",
    )
    enable_request_logging: bool = Field(
        default=True,
        description="Log every HTTP request and response",
    )
    quiet_loggers: list[str] = Field(
        default=["urllib3", "botocore", "httpx", "google_genai"],
        description="Third-party loggers lowered to WARNING",
    )

    class Config:
        """Pydantic config for environment variable loading."""

        env_prefix = "OBSERVABILITY_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"
