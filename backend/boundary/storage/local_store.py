"""
Local filesystem blob store for development.

Stores uploads under a root directory, one file per locator.

Dependencies: asyncio, pathlib
System role: Development blob store (no AWS dependency)
"""

import asyncio
import logging
from pathlib import Path

from backend.boundary.storage.base import BlobStore
from backend.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class LocalBlobStore(BlobStore):
    """Blob store backed by a local directory."""

    def __init__(self, root: str | Path) -> None:
        """
        Initialize local store.

        Args:
            root: Directory holding all blobs (created on first write)
        """
        self._root = Path(root).resolve()

    def _path(self, locator: str) -> Path:
        path = (self._root / locator).resolve()
        if self._root not in path.parents:
            raise StorageError("Locator escapes the storage root", locator)
        return path

    async def put(self, locator: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        path = self._path(locator)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise StorageError(f"Failed to write blob: {e}", locator) from e
        logger.debug(f"{__name__}:put - Stored {len(data)} bytes", extra={"locator": locator})

    async def get(self, locator: str) -> bytes:
        path = self._path(locator)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as e:
            raise StorageError(f"Blob not found: {locator}", locator) from e
        except OSError as e:
            raise StorageError(f"Failed to read blob: {e}", locator) from e

    async def delete(self, locator: str) -> None:
        path = self._path(locator)
        try:
            await asyncio.to_thread(path.unlink, True)
        except OSError as e:
            raise StorageError(f"Failed to delete blob: {e}", locator) from e
