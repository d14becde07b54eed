"""
Models for document processing pipeline.

Exports: Chunk, ContentItem, IngestionResult
"""

from .chunk import Chunk
from .content_item import ContentItem
from .ingestion_result import IngestionResult

__all__ = [
    "Chunk",
    "ContentItem",
    "IngestionResult",
]
