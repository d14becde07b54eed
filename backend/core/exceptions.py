"""
Exception hierarchy for the multimodal RAG application.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class RAGException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(RAGException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class DocumentNotFoundError(RAGException):
    """Raised when a document cannot be found."""

    def __init__(self, document_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["document_id"] = document_id
        super().__init__(f"Document not found: {document_id}", details)


class DocumentProcessingError(RAGException):
    """Base exception for errors that fail a document's ingestion."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            document_id: ID of the document that failed
            details: Additional context
        """
        details = details or {}
        if document_id:
            details["document_id"] = document_id
        super().__init__(message, details)


class UnsupportedModalityError(DocumentProcessingError):
    """Raised when a file extension maps to no known modality. Not retryable."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        file_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize unsupported modality error.

        Args:
            message: Error message
            document_id: ID of the document
            file_type: Extension that could not be dispatched
            details: Additional context
        """
        details = details or {}
        if file_type is not None:
            details["file_type"] = file_type
        super().__init__(message, document_id, details)


class EmptyContentError(DocumentProcessingError):
    """Raised when extraction and segmentation produce zero chunks."""

    pass


class ExternalServiceError(DocumentProcessingError):
    """Raised when a model or storage provider call fails. Retrying the ingestion may succeed."""

    def __init__(
        self,
        message: str,
        service: str | None = None,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if service:
            details["service"] = service
        super().__init__(message, document_id, details)


class IngestionTimeoutError(DocumentProcessingError):
    """Raised when a pipeline step exceeds its timeout."""

    def __init__(
        self,
        step: str,
        timeout_seconds: float,
        document_id: str | None = None,
    ) -> None:
        super().__init__(
            f"Step '{step}' timed out after {timeout_seconds:g}s",
            document_id,
            {"step": step, "timeout_seconds": timeout_seconds},
        )


class EntityExtractionError(RAGException):
    """Raised when entity/relation extraction fails. Never fails the document."""

    pass


class StorageError(RAGException):
    """Raised when blob store operations fail."""

    def __init__(
        self,
        message: str,
        locator: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if locator:
            details["locator"] = locator
        super().__init__(message, details)


class VectorStoreError(RAGException):
    """Raised when vector search operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (search, upsert, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class RetrievalError(RAGException):
    """Raised when retrieval operations fail."""

    def __init__(
        self,
        message: str,
        mode: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize retrieval error.

        Args:
            message: Error message
            mode: Retrieval mode that failed
            details: Additional context
        """
        details = details or {}
        if mode:
            details["mode"] = mode
        super().__init__(message, details)
