"""
Per-modality content extractors.

Exports: BaseExtractor, get_extractor and the concrete extractors
"""

from backend.boundary.db.models import Modality
from backend.boundary.llm import ContentService
from backend.core.document_processing.configs import IngestionSettings

from .audio_extractor import AudioExtractor
from .base import BaseExtractor
from .document_extractor import DocumentExtractor
from .image_extractor import ImageExtractor
from .text_extractor import TextExtractor
from .video_extractor import VideoExtractor

_EXTRACTORS: dict[Modality, type[BaseExtractor]] = {
    Modality.TEXT: TextExtractor,
    Modality.DOCUMENT: DocumentExtractor,
    Modality.IMAGE: ImageExtractor,
    Modality.VIDEO: VideoExtractor,
    Modality.AUDIO: AudioExtractor,
}


def get_extractor(
    modality: Modality,
    content_service: ContentService | None = None,
    settings: IngestionSettings | None = None,
) -> BaseExtractor:
    """Instantiate the extractor registered for a modality."""
    return _EXTRACTORS[Modality(modality)](content_service=content_service, settings=settings)


__all__ = [
    "BaseExtractor",
    "TextExtractor",
    "DocumentExtractor",
    "ImageExtractor",
    "VideoExtractor",
    "AudioExtractor",
    "get_extractor",
]
