"""
Model provider boundary.

Exports:
  - ContentService, GeminiContentService, FileHandle: content understanding
  - EmbeddingService: vector generation
"""

from backend.boundary.llm.content_service import (
    ContentService,
    FileHandle,
    GeminiContentService,
    message_text,
)
from backend.boundary.llm.embedding_service import EmbeddingService

__all__ = [
    "ContentService",
    "FileHandle",
    "GeminiContentService",
    "EmbeddingService",
    "message_text",
]
