"""
Command-line entry point.

Wires settings, the workflow's pull request context, and the concrete
clients into a VideoPublisher, then reports the run outputs back to
the Actions runner.

In a workflow step:
    python -m cypress_pr_videos

Locally, with an .env file and R2_MOCK_MODE=true:
    cypress-pr-videos
"""

import asyncio
import json
import logging
from typing import Optional, Sequence

import httpx

from .config.settings import Settings, get_settings
from .core.videos.models import UploadResult
from .core.videos.publisher import VideoPublisher
from .core.videos.uploads import ObjectStore
from .infrastructure.github.actions import load_pull_request_context, set_failed, set_output
from .infrastructure.github.client import GitHubClient, GitHubConfig
from .infrastructure.storage.client import StorageConfig, create_storage_client

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> ObjectStore:
    """Storage client for the configured backend (R2 or in-memory mock)."""
    if settings.r2_mock_mode:
        return create_storage_client(mock_mode=True)

    config = StorageConfig(
        access_key_id=settings.r2_access_key_id,
        secret_access_key=settings.r2_secret_access_key,
        bucket_name=settings.r2_bucket_name,
        endpoint_url=settings.r2_endpoint,
    )
    return create_storage_client(config=config)


def write_outputs(results: Sequence[UploadResult], output_path: Optional[str] = None) -> None:
    """Publish the uploaded videos as step outputs."""
    set_output("video-urls", json.dumps([result.to_dict() for result in results]), output_path)
    set_output("videos-uploaded", str(len(results)), output_path)


async def run(
    settings: Settings,
    store: Optional[ObjectStore] = None,
    github_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    """
    Publish videos for the pull request this workflow run belongs to.

    Returns the process exit code. Configuration errors and failures to
    list the changed files propagate to the caller.
    """
    context = load_pull_request_context(settings.github_event_path, settings.github_repository)
    if context is None:
        logger.info("Not a pull_request event. Skipping.")
        return 0

    if context.is_fork:
        logger.info("Skipping: fork PRs not supported.")
        return 0

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        raise ValueError(f"Missing required configuration: {', '.join(missing_fields)}")

    if store is None:
        store = create_store(settings)

    github_config = GitHubConfig(token=settings.github_token, api_url=settings.github_api_url)

    async with GitHubClient(github_config, transport=github_transport) as github:
        publisher = VideoPublisher(diff_provider=github, store=store, comment_host=github)
        results = await publisher.publish(context.pull_request, settings.publish_options())

    write_outputs(results, settings.github_output)

    if results:
        logger.info("Successfully uploaded %d video(s) and posted PR comment.", len(results))
    return 0


def main(settings: Optional[Settings] = None) -> int:
    """
    Run once and return an exit code.

    Any error that escapes the pipeline becomes a single failure
    annotation carrying its message.
    """
    logging.basicConfig(format=LOG_FORMAT, level=logging.INFO)

    try:
        if settings is None:
            settings = get_settings()
        logging.getLogger().setLevel(settings.log_level.upper())

        return asyncio.run(run(settings))

    except Exception as e:
        logger.debug("Run failed", exc_info=e)
        set_failed(str(e) or type(e).__name__)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
