"""
Unit tests for the object storage clients.

The R2 client is exercised through botocore's Stubber, so no request
leaves the process. Presigned URLs are signed locally and need no stub.
"""

import asyncio
import io

import pytest
from botocore.stub import Stubber

from cypress_pr_videos.core.videos.errors import ObjectStoreError
from cypress_pr_videos.infrastructure.storage.client import (
    MockStorageClient,
    R2StorageClient,
    StorageConfig,
    StorageError,
    create_storage_client,
)


KEY = "cypress/test-org/test-repo/pr-42/auth/login.cy.ts.mp4"


@pytest.fixture
def config() -> StorageConfig:
    return StorageConfig(
        access_key_id="test-key",
        secret_access_key="test-secret",
        bucket_name="videos",
        endpoint_url="https://account.r2.cloudflarestorage.com",
    )


class TestStorageConfig:
    """Tests for storage configuration validation."""

    def test_requires_bucket(self):
        with pytest.raises(ValueError, match="bucket_name"):
            StorageConfig(
                access_key_id="k",
                secret_access_key="s",
                bucket_name="",
                endpoint_url="https://example.com",
            )


class TestR2StorageClient:
    """Tests for the boto3-backed client."""

    def test_put_object_sends_request(self, config):
        client = R2StorageClient(config)
        body = io.BytesIO(b"video")

        with Stubber(client._s3_client) as stubber:
            stubber.add_response("put_object", {})
            asyncio.run(client.put_object(KEY, body, "video/mp4"))
            stubber.assert_no_pending_responses()

    def test_put_object_wraps_client_errors(self, config):
        client = R2StorageClient(config)

        with Stubber(client._s3_client) as stubber:
            stubber.add_client_error("put_object", service_error_code="AccessDenied", http_status_code=403)

            with pytest.raises(StorageError, match="Upload failed"):
                asyncio.run(client.put_object(KEY, io.BytesIO(b"video"), "video/mp4"))

    def test_storage_error_is_an_object_store_error(self):
        assert issubclass(StorageError, ObjectStoreError)

    def test_presigned_url_uses_path_style_and_expiry(self, config):
        client = R2StorageClient(config)

        url = asyncio.run(client.get_presigned_url(KEY, 3600))

        assert url.startswith(f"https://account.r2.cloudflarestorage.com/videos/{KEY}?")
        assert "X-Amz-Expires=3600" in url
        assert "X-Amz-Signature=" in url


class TestMockStorageClient:
    """Tests for the in-memory client."""

    def test_round_trip(self):
        client = MockStorageClient()

        asyncio.run(client.put_object(KEY, io.BytesIO(b"video"), "video/mp4"))
        url = asyncio.run(client.get_presigned_url(KEY, 60))

        assert client.get_object(KEY) == b"video"
        assert url == f"mock://storage/{KEY}?expires=60"

    def test_presign_unknown_key_fails(self):
        with pytest.raises(StorageError, match="not found"):
            asyncio.run(MockStorageClient().get_presigned_url("missing", 60))


class TestCreateStorageClient:
    """Tests for the factory."""

    def test_mock_mode(self):
        assert isinstance(create_storage_client(mock_mode=True), MockStorageClient)

    def test_real_mode_requires_config(self):
        with pytest.raises(ValueError, match="config is required"):
            create_storage_client()

    def test_real_mode(self, config):
        assert isinstance(create_storage_client(config=config), R2StorageClient)
