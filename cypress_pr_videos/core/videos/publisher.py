"""
The publishing pipeline, one run per pull request event.

    changed specs -> video index -> matches -> uploads -> comment

Each stage only consumes the previous stage's output plus its own
collaborator. Only a failure to list the changed specs ends the run;
everything after that degrades per spec or per upload.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Union

from .comments import CommentHost, CommentUpserter
from .indexing import index_videos, match_specs
from .models import ChangedSpec, DisplayMode, PullRequestRef, UploadResult
from .uploads import DEFAULT_MAX_CONCURRENT, DEFAULT_URL_EXPIRY_SECONDS, ObjectStore, VideoUploader

logger = logging.getLogger(__name__)

DEFAULT_SPEC_PATTERN = "cypress/e2e/**/*.cy.{ts,js,tsx,jsx}"
DEFAULT_VIDEO_DIR = "cypress/videos"
DEFAULT_COMMENT_HEADER = "### 🎬 Cypress Test Videos"


class DiffProvider(Protocol):
    """Interface for listing the files a pull request changes."""

    async def list_changed_specs(
        self,
        pull_request: PullRequestRef,
        spec_pattern: str,
    ) -> list[ChangedSpec]:
        """Changed files matching spec_pattern, excluding deletions, in diff order."""
        ...


@dataclass
class PublishOptions:
    """Per-run knobs for the pipeline."""
    spec_pattern: str = DEFAULT_SPEC_PATTERN
    video_dir: Union[str, Path] = DEFAULT_VIDEO_DIR
    comment_header: str = DEFAULT_COMMENT_HEADER
    url_expiry_seconds: int = DEFAULT_URL_EXPIRY_SECONDS
    max_concurrent_uploads: int = DEFAULT_MAX_CONCURRENT
    display_mode: DisplayMode = DisplayMode.INLINE


class VideoPublisher:
    """Runs the pipeline against a set of collaborators."""

    def __init__(
        self,
        diff_provider: DiffProvider,
        store: ObjectStore,
        comment_host: CommentHost,
    ) -> None:
        self._diff_provider = diff_provider
        self._store = store
        self._comments = CommentUpserter(comment_host)

    async def publish(
        self,
        pull_request: PullRequestRef,
        options: PublishOptions,
    ) -> list[UploadResult]:
        """
        Upload videos for the specs changed in pull_request and comment on it.

        Returns the uploaded videos in spec order. DiffProviderError
        propagates; no other collaborator failure does.
        """
        specs = await self._diff_provider.list_changed_specs(pull_request, options.spec_pattern)
        if not specs:
            logger.info("No spec files changed in this PR, skipping.")
            return []

        index = index_videos(options.video_dir)
        if not index:
            logger.info(
                "No .mp4 files found in %s. Ensure Cypress video recording is enabled.",
                options.video_dir,
            )
            return []

        logger.info("Found %d video file(s) in %s", len(index), options.video_dir)

        matches = match_specs(specs, index)
        if not matches:
            logger.info("No videos found on disk for changed specs, skipping.")
            return []

        uploader = VideoUploader(
            self._store,
            max_concurrent=options.max_concurrent_uploads,
            url_expiry_seconds=options.url_expiry_seconds,
        )
        results = await uploader.upload(matches, pull_request)
        if not results:
            logger.warning("No videos were uploaded successfully.")
            return []

        await self._comments.upsert(
            pull_request,
            results,
            options.comment_header,
            options.url_expiry_seconds,
            options.display_mode,
        )
        return results
