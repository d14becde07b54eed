"""
S3 blob store.

Stores original uploads in an S3 bucket. boto3 calls are blocking and run
in a worker thread.

Dependencies: boto3
System role: Production blob store
"""

import asyncio
import logging

import boto3
from botocore.exceptions import ClientError

from backend.boundary.storage.base import BlobStore
from backend.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class S3BlobStore(BlobStore):
    """Blob store backed by an S3 bucket."""

    def __init__(self, bucket: str, region: str = "us-east-1", client=None) -> None:
        """
        Initialize S3 blob store.

        Args:
            bucket: S3 bucket name for document storage
            region: AWS region for S3 bucket
            client: Optional preconfigured boto3 S3 client
        """
        if not bucket:
            raise ValueError("bucket cannot be empty")
        self._bucket = bucket
        self._s3_client = client or boto3.client("s3", region_name=region)

    async def put(self, locator: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        try:
            await asyncio.to_thread(
                self._s3_client.put_object,
                Bucket=self._bucket,
                Key=locator,
                Body=data,
                ContentType=content_type,
            )
        except ClientError as e:
            raise StorageError(f"Failed to upload to S3: {e}", locator) from e

    async def get(self, locator: str) -> bytes:
        try:
            response = await asyncio.to_thread(
                self._s3_client.get_object,
                Bucket=self._bucket,
                Key=locator,
            )
            return await asyncio.to_thread(response["Body"].read)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey"):
                raise StorageError(f"File not found in S3: {locator}", locator) from e
            raise StorageError(f"Failed to download from S3: {e}", locator) from e

    async def delete(self, locator: str) -> None:
        try:
            await asyncio.to_thread(
                self._s3_client.delete_object,
                Bucket=self._bucket,
                Key=locator,
            )
        except ClientError as e:
            raise StorageError(f"Failed to delete from S3: {e}", locator) from e
