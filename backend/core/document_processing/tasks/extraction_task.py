"""
Modality dispatch task.

Resolves the content category from the filename and runs the matching
extractor.

Dependencies: extractors, modality
System role: Second stage of document ingestion pipeline
"""

import logging
from pathlib import Path

from backend.boundary.db.models import Modality
from backend.boundary.llm import ContentService
from backend.core.exceptions import UnsupportedModalityError

from ..configs import IngestionSettings
from ..extractors import get_extractor
from ..modality import file_type_of, mime_type_for, resolve_modality
from ..models import ContentItem

logger = logging.getLogger(__name__)


class ExtractionTask:
    """Dispatch raw bytes to the per-modality extractor."""

    def __init__(
        self,
        content_service: ContentService | None,
        settings: IngestionSettings | None = None,
    ) -> None:
        self._content_service = content_service
        self._settings = settings

    async def extract(
        self,
        data: bytes,
        filename: str,
        modality: Modality | str | None = None,
        metadata: dict | None = None,
    ) -> list[ContentItem]:
        """
        Extract content items from a document.

        The extension is always resolved first. A stored modality that
        disagrees with it is logged and the extension wins.

        Args:
            data: Raw file content
            filename: Original filename or locator
            modality: Modality recorded at upload time
            metadata: Document metadata passed to the extractor

        Returns:
            list[ContentItem]: Extracted items

        Raises:
            UnsupportedModalityError: Unknown extension
        """
        name = Path(filename).name
        resolved = resolve_modality(name)
        if modality is not None:
            try:
                if Modality(modality) != resolved:
                    logger.warning(
                        f"{__name__}:extract - Stored modality disagrees with extension",
                        extra={"stored": str(modality), "resolved": resolved.value, "file_name": name},
                    )
            except ValueError as e:
                raise UnsupportedModalityError(
                    f"Unknown modality: {modality}", file_type=file_type_of(name)
                ) from e

        extractor = get_extractor(resolved, self._content_service, self._settings)
        items = await extractor.extract(data, name, mime_type_for(name), metadata or {})

        logger.info(
            f"{__name__}:extract - Extracted content items",
            extra={"modality": resolved.value, "items": len(items), "file_name": name},
        )
        return items
