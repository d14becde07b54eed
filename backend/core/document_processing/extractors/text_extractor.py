"""
Plain text and Markdown extraction.

Dependencies: none beyond the extractor base
System role: Text modality extractor
"""

from backend.boundary.db.models import ChunkType
from backend.core.document_processing.models import ContentItem

from .base import BaseExtractor


class TextExtractor(BaseExtractor):
    """Decode bytes as UTF-8 into a single text item."""

    async def extract(self, data, filename, mime_type, metadata=None):
        text = data.decode("utf-8", errors="replace")
        item_metadata = {"filename": filename}
        if filename.lower().endswith(".md"):
            item_metadata["is_markdown"] = True
        return [ContentItem(type=ChunkType.TEXT, content=text, position_hint=0, metadata=item_metadata)]
