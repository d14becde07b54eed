"""
Document ingestion pipeline.

Dispatches uploads by modality, extracts and segments their content,
embeds and persists chunks, and builds the knowledge graph.

The orchestrator lives in `entrypoint` and is imported from there; this
package root only exposes configuration and data models so that the
knowledge graph package can use the parsing helpers without a cycle.

Dependencies: pydantic, pydantic_settings
System role: Document ingestion pipeline package
"""

from .configs import IngestionSettings, get_ingestion_settings
from .models import Chunk, ContentItem, IngestionResult

__all__ = [
    "IngestionSettings",
    "get_ingestion_settings",
    "Chunk",
    "ContentItem",
    "IngestionResult",
]
