"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
Ingestion pipeline settings live beside the pipeline in
backend.core.document_processing.configs.
"""

from backend.configs.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
