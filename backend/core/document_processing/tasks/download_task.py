"""
Blob download task.

Fetches a document's original bytes from the blob store by locator.

Dependencies: backend.boundary.storage
System role: First stage of document ingestion pipeline
"""

import logging

from backend.boundary.storage import BlobStore
from backend.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class DownloadError(StorageError):
    """Raised when a blob cannot be downloaded."""

    pass


class DownloadTask:
    """Download document bytes from the blob store."""

    def __init__(self, blob_store: BlobStore) -> None:
        """
        Initialize download task.

        Args:
            blob_store: Store holding uploaded documents
        """
        self._blob_store = blob_store

    async def download(self, locator: str) -> bytes:
        """
        Download document bytes.

        Args:
            locator: Blob key (e.g., "uploads/<uuid>/report.pdf")

        Returns:
            bytes: Document content

        Raises:
            DownloadError: Locator is empty or the store call failed
        """
        if not locator:
            raise DownloadError("Storage locator is required", locator)

        try:
            data = await self._blob_store.get(locator)
        except StorageError as e:
            raise DownloadError(f"Failed to download blob: {e.message}", locator) from e

        logger.info(
            f"{__name__}:download - Downloaded blob",
            extra={"locator": locator, "bytes": len(data)},
        )
        return data
