"""
Uploading matched videos with bounded concurrency.

A fixed pool of workers pulls positions from a shared cursor over the
match list. Each worker writes its result into the slot for that
position, so the returned list follows input order no matter which
upload finishes first. A failed upload leaves its slot empty and is
dropped from the result; it never cancels its siblings.
"""

import asyncio
import itertools
import logging
from typing import BinaryIO, Optional, Protocol, Sequence

from .models import VIDEO_CONTENT_TYPE, Match, PullRequestRef, UploadResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT = 5
DEFAULT_URL_EXPIRY_SECONDS = 72 * 3600


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class ObjectStore(Protocol):
    """
    Interface for S3-compatible object storage.

    The bucket, credentials, and retry policy belong to the
    implementation. Failures surface as ObjectStoreError.
    """

    async def put_object(
        self,
        key: str,
        body: BinaryIO,
        content_type: str,
    ) -> None:
        """Stream body to the store under key, overwriting any existing object."""
        ...

    async def get_presigned_url(
        self,
        key: str,
        expiry_seconds: int,
    ) -> str:
        """Generate a time-limited GET URL for key."""
        ...


# ---------------------------------------------------------------------------
# Upload Orchestrator
# ---------------------------------------------------------------------------

class VideoUploader:
    """
    Uploads matched videos and signs a playback URL for each one.

    Stateless between calls apart from its dependencies; every call to
    upload() starts a fresh worker pool.
    """

    def __init__(
        self,
        store: ObjectStore,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        url_expiry_seconds: int = DEFAULT_URL_EXPIRY_SECONDS,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        if url_expiry_seconds < 1:
            raise ValueError("url_expiry_seconds must be positive")

        self._store = store
        self._max_concurrent = max_concurrent
        self._url_expiry_seconds = url_expiry_seconds

    async def upload(
        self,
        matches: Sequence[Match],
        pull_request: PullRequestRef,
    ) -> list[UploadResult]:
        """
        Upload every match, at most max_concurrent at a time.

        Returns the successful uploads in the order of `matches`.
        """
        if not matches:
            return []

        slots: list[Optional[UploadResult]] = [None] * len(matches)
        cursor = itertools.count()

        async def worker() -> None:
            # workers only switch at an await, so next() hands out each position once
            while True:
                position = next(cursor)
                if position >= len(matches):
                    return
                slots[position] = await self._upload_one(matches[position], pull_request)

        worker_count = min(self._max_concurrent, len(matches))
        await asyncio.gather(*(worker() for _ in range(worker_count)))

        results = [result for result in slots if result is not None]

        logger.info(
            "Uploaded %d of %d video(s)",
            len(results),
            len(matches),
            extra={"workers": worker_count, "pull_request": pull_request.number}
        )
        return results

    async def _upload_one(
        self,
        match: Match,
        pull_request: PullRequestRef,
    ) -> Optional[UploadResult]:
        """Upload one video and sign its URL. Returns None on failure."""
        key = pull_request.object_key(match.video_key)

        try:
            with match.video_path.open("rb") as body:
                await self._store.put_object(key, body, VIDEO_CONTENT_TYPE)

            url = await self._store.get_presigned_url(key, self._url_expiry_seconds)

        except Exception as e:
            logger.error(
                "Failed to upload %s: %s",
                match.spec_path,
                e,
                extra={"storage_key": key, "video_path": str(match.video_path)}
            )
            return None

        logger.info("Uploaded %s -> %s", match.spec_path, key)
        return UploadResult(spec=match.spec_path, url=url)
