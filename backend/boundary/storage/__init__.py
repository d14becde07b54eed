"""
Blob storage boundary.

Selects the local or S3 backend from STORAGE_BACKEND.

Dependencies: backend.configs, boto3
System role: Blob store instantiation and selection
"""

import logging

from backend.boundary.storage.base import BlobStore, build_locator, sanitize_filename
from backend.boundary.storage.local_store import LocalBlobStore
from backend.boundary.storage.s3_store import S3BlobStore
from backend.configs import get_settings

logger = logging.getLogger(__name__)


def get_blob_store() -> BlobStore:
    """
    Factory function returning the configured blob store.

    Returns:
        LocalBlobStore or S3BlobStore

    Raises:
        ValueError: If STORAGE_BACKEND is invalid
    """
    storage = get_settings().storage
    backend = storage.backend.lower()

    if backend == "local":
        logger.info(f"{__name__}:get_blob_store - Using local blob store at {storage.local_root}")
        return LocalBlobStore(storage.local_root)
    if backend == "s3":
        logger.info(f"{__name__}:get_blob_store - Using S3 bucket {storage.bucket}")
        return S3BlobStore(bucket=storage.bucket, region=storage.region)

    raise ValueError(
        f"Invalid STORAGE_BACKEND: {backend}. Must be 'local' or 's3'."
    )


__all__ = [
    "BlobStore",
    "LocalBlobStore",
    "S3BlobStore",
    "build_locator",
    "sanitize_filename",
    "get_blob_store",
]
