"""
Core business logic module.

Contains the ingestion pipeline, knowledge graph extraction, retrieval engine
and the exception hierarchy. Submodules are imported explicitly by callers.
"""

from backend.core.exceptions import (
    RAGException,
    ValidationError,
    DocumentNotFoundError,
    DocumentProcessingError,
    UnsupportedModalityError,
    EmptyContentError,
    ExternalServiceError,
    IngestionTimeoutError,
    EntityExtractionError,
    StorageError,
    VectorStoreError,
    RetrievalError,
)

__all__ = [
    "RAGException",
    "ValidationError",
    "DocumentNotFoundError",
    "DocumentProcessingError",
    "UnsupportedModalityError",
    "EmptyContentError",
    "ExternalServiceError",
    "IngestionTimeoutError",
    "EntityExtractionError",
    "StorageError",
    "VectorStoreError",
    "RetrievalError",
]
