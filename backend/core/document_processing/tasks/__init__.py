"""
Task modules for document processing pipeline.

Exports: DownloadTask, ExtractionTask, ChunkingTask, EmbeddingTask, SavingTask, EntityExtractionTask
"""

from .chunking_task import ChunkingTask
from .download_task import DownloadError, DownloadTask
from .embedding_task import EmbeddingTask
from .entity_task import EntityExtractionTask
from .extraction_task import ExtractionTask
from .saving_task import SavingTask

__all__ = [
    "DownloadTask",
    "DownloadError",
    "ExtractionTask",
    "ChunkingTask",
    "EmbeddingTask",
    "SavingTask",
    "EntityExtractionTask",
]
