"""
Standalone image extraction.

Dependencies: backend.boundary.llm
System role: Image modality extractor
"""

import logging

from backend.boundary.db.models import ChunkType
from backend.core.document_processing.models import ContentItem

from .base import BaseExtractor
from .prompts import IMAGE_DESCRIPTION_PROMPT

logger = logging.getLogger(__name__)

IMAGE_FALLBACK_TEXT = "Image could not be analyzed."


class ImageExtractor(BaseExtractor):
    """Describe an image file with the vision model."""

    async def extract(self, data, filename, mime_type, metadata=None):
        item_metadata = {"mime_type": mime_type, "is_standalone_image": True}
        try:
            description = await self.content_service.describe(data, mime_type, IMAGE_DESCRIPTION_PROMPT)
            if not description.strip():
                raise ValueError("empty image description")
        except Exception as e:
            logger.warning(
                f"{__name__}:extract - Image description failed, using placeholder",
                extra={"file_name": filename, "error": str(e)},
            )
            description = IMAGE_FALLBACK_TEXT
            item_metadata["processing_error"] = str(e) or type(e).__name__

        return [ContentItem(type=ChunkType.IMAGE, content=description, position_hint=0, metadata=item_metadata)]
