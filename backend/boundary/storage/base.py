"""
Blob store interface.

Original uploaded bytes are stored under a locator string
(uploads/{document_id}/{sanitized_filename}) and read back by the
ingestion pipeline.

Dependencies: abc, re
System role: Storage abstraction shared by local and S3 backends
"""

import re
from abc import ABC, abstractmethod
from uuid import UUID


def sanitize_filename(filename: str) -> str:
    """Replace whitespace with underscores and drop characters outside [A-Za-z0-9._-]."""
    name = re.sub(r"\s+", "_", filename.strip())
    name = re.sub(r"[^A-Za-z0-9._-]", "", name)
    return name or "file"


def build_locator(document_id: UUID | str, filename: str) -> str:
    """Blob key for a document's original bytes."""
    return f"uploads/{document_id}/{sanitize_filename(filename)}"


class BlobStore(ABC):
    """Async key-value store for original file bytes."""

    @abstractmethod
    async def put(self, locator: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        """Store bytes under `locator`, overwriting any previous value."""

    @abstractmethod
    async def get(self, locator: str) -> bytes:
        """
        Read bytes stored under `locator`.

        Raises:
            StorageError: When the locator does not exist or the read fails
        """

    @abstractmethod
    async def delete(self, locator: str) -> None:
        """Remove `locator`. Missing keys are ignored."""
