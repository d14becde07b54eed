"""
Modality detection from file extensions.

Maps a filename to one of the five content categories and to the MIME
type sent to the content service.

Dependencies: pathlib
System role: Dispatch table for the extractors
"""

from pathlib import Path

from backend.boundary.db.models import Modality
from backend.core.exceptions import UnsupportedModalityError

TEXT_EXTENSIONS = frozenset({"txt", "md"})
DOCUMENT_EXTENSIONS = frozenset({"pdf", "docx", "pptx", "xlsx"})
IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp"})
VIDEO_EXTENSIONS = frozenset({"mp4", "webm", "mov", "avi"})
AUDIO_EXTENSIONS = frozenset({"mp3", "wav", "ogg", "flac", "m4a", "aac"})

_MODALITY_BY_EXTENSION: dict[str, Modality] = {
    **{ext: Modality.TEXT for ext in TEXT_EXTENSIONS},
    **{ext: Modality.DOCUMENT for ext in DOCUMENT_EXTENSIONS},
    **{ext: Modality.IMAGE for ext in IMAGE_EXTENSIONS},
    **{ext: Modality.VIDEO for ext in VIDEO_EXTENSIONS},
    **{ext: Modality.AUDIO for ext in AUDIO_EXTENSIONS},
}

MIME_TYPES: dict[str, str] = {
    "txt": "text/plain",
    "md": "text/markdown",
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mov": "video/quicktime",
    "avi": "video/x-msvideo",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
    "m4a": "audio/mp4",
    "aac": "audio/aac",
}

DEFAULT_MIME_TYPE = "application/octet-stream"

SUPPORTED_EXTENSIONS = frozenset(_MODALITY_BY_EXTENSION)


def file_type_of(filename: str) -> str:
    """Lowercased extension without the dot ("" when there is none)."""
    return Path(filename).suffix.lower().lstrip(".")


def resolve_modality(filename: str) -> Modality:
    """
    Resolve the content category of a file from its extension.

    Args:
        filename: Original filename or storage locator

    Returns:
        Modality: Content category

    Raises:
        UnsupportedModalityError: Extension is missing or not supported
    """
    file_type = file_type_of(filename)
    modality = _MODALITY_BY_EXTENSION.get(file_type)
    if modality is None:
        raise UnsupportedModalityError(
            f"Unsupported file type: '{file_type or filename}'",
            file_type=file_type,
        )
    return modality


def mime_type_for(filename: str) -> str:
    return MIME_TYPES.get(file_type_of(filename), DEFAULT_MIME_TYPE)
