"""
Object storage client for uploaded test videos.

Supports Cloudflare R2 (S3-compatible) with mock mode for local runs.
R2 has no egress fees, which matters for video that reviewers stream
straight from signed URLs, and it speaks the S3 API so plain S3 or
MinIO work by pointing the endpoint elsewhere.

Mock mode stores objects in memory, so the whole pipeline can be run
without provisioning a bucket.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ...core.videos.errors import ObjectStoreError
from ...core.videos.uploads import ObjectStore

logger = logging.getLogger(__name__)


class StorageError(ObjectStoreError):
    """Raised when storage operations fail."""
    pass


@dataclass
class StorageConfig:
    """Configuration for R2/S3-compatible storage."""
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    endpoint_url: str
    region: str = "auto"  # R2 uses 'auto' for region
    max_attempts: int = 3

    def __post_init__(self) -> None:
        if not self.bucket_name:
            raise ValueError("bucket_name is required")
        if not self.endpoint_url:
            raise ValueError("endpoint_url is required")


class R2StorageClient:
    """
    Cloudflare R2 object storage client.

    boto3 is synchronous, so each call runs in a worker thread. That
    keeps the event loop free and lets concurrent uploads actually
    overlap on the network.
    """

    def __init__(self, config: StorageConfig) -> None:
        self._config = config

        # R2 requires v4 signatures and path-style addressing
        boto_config = Config(
            signature_version='s3v4',
            s3={'addressing_style': 'path'},
            retries={'max_attempts': config.max_attempts, 'mode': 'standard'},
        )

        self._s3_client = boto3.client(
            's3',
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized R2 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url,
            }
        )

    async def put_object(
        self,
        key: str,
        body: BinaryIO,
        content_type: str,
    ) -> None:
        """
        Stream a file object to R2 under key.

        Keys are deterministic per pull request and spec, so this
        overwrites the object from any earlier run.
        """
        try:
            await asyncio.to_thread(
                self._s3_client.put_object,
                Bucket=self._config.bucket_name,
                Key=key,
                Body=body,
                ContentType=content_type,
            )

            logger.debug(
                "Uploaded object",
                extra={"storage_key": key, "content_type": content_type}
            )

        except (BotoCoreError, ClientError) as e:
            logger.debug(
                "Failed to upload object",
                extra={"storage_key": key, "error": str(e)}
            )
            raise StorageError(f"Upload failed: {e}") from e

    async def get_presigned_url(
        self,
        key: str,
        expiry_seconds: int,
    ) -> str:
        """
        Generate a temporary download URL.

        Signing happens locally with the configured credentials; no
        request is made to R2.
        """
        try:
            return await asyncio.to_thread(
                self._s3_client.generate_presigned_url,
                'get_object',
                Params={
                    'Bucket': self._config.bucket_name,
                    'Key': key,
                },
                ExpiresIn=expiry_seconds,
            )

        except (BotoCoreError, ClientError) as e:
            logger.debug(
                "Failed to generate presigned URL",
                extra={"storage_key": key, "error": str(e)}
            )
            raise StorageError(f"Presigned URL generation failed: {e}") from e


# ---------------------------------------------------------------------------
# Mock Storage for Local Runs
# ---------------------------------------------------------------------------

class MockStorageClient:
    """
    In-memory storage for local runs and tests.

    Objects are kept in a dictionary and "URLs" are mock URIs.
    """

    def __init__(self) -> None:
        # {key: (content_type, bytes)}
        self._objects: dict[str, tuple[str, bytes]] = {}
        logger.info("Initialized mock storage client (in-memory)")

    async def put_object(
        self,
        key: str,
        body: BinaryIO,
        content_type: str,
    ) -> None:
        """Store the stream's contents in memory."""
        data = body.read()
        self._objects[key] = (content_type, data)

        logger.debug(
            "Stored object in mock storage",
            extra={"storage_key": key, "size_bytes": len(data)}
        )

    async def get_presigned_url(
        self,
        key: str,
        expiry_seconds: int,
    ) -> str:
        """Return a mock URL for a stored object."""
        if key not in self._objects:
            raise StorageError(f"Object not found: {key}")

        return f"mock://storage/{key}?expires={expiry_seconds}"

    def get_object(self, key: str) -> bytes:
        """Stored bytes for key, for inspecting dry runs."""
        if key not in self._objects:
            raise StorageError(f"Object not found: {key}")

        return self._objects[key][1]

    @property
    def keys(self) -> list[str]:
        return list(self._objects)


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> ObjectStore:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return the in-memory client

    Returns:
        ObjectStore implementation (R2 or Mock)
    """
    if mock_mode:
        return MockStorageClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return R2StorageClient(config)
