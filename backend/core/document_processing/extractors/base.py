"""
Extractor interface.

Dependencies: abc, logging
System role: Contract for per-modality content extraction
"""

from abc import ABC, abstractmethod

from backend.boundary.llm import ContentService
from backend.core.document_processing.configs import IngestionSettings, get_ingestion_settings
from backend.core.document_processing.models import ContentItem


class BaseExtractor(ABC):
    """Turns raw file bytes into content items for segmentation."""

    def __init__(
        self,
        content_service: ContentService | None = None,
        settings: IngestionSettings | None = None,
    ) -> None:
        self._content_service = content_service
        self._settings = settings or get_ingestion_settings()

    @property
    def content_service(self) -> ContentService:
        if self._content_service is None:
            raise RuntimeError(f"{type(self).__name__} requires a content service")
        return self._content_service

    @abstractmethod
    async def extract(
        self,
        data: bytes,
        filename: str,
        mime_type: str,
        metadata: dict | None = None,
    ) -> list[ContentItem]:
        """
        Extract content items from file bytes.

        Args:
            data: Raw file content
            filename: Original filename
            mime_type: MIME type sent to the content service
            metadata: Document metadata (e.g. duration_seconds hint)

        Returns:
            list[ContentItem]: At least one item per unit of work
        """
