"""
GitHub REST API client.

Serves two roles for the pipeline: it lists the files a pull request
changes (the diff provider) and it reads and writes issue comments on
the pull request (the comment host). HTTP failures are translated into
the matching core error so the pipeline can tell a fatal diff failure
from a recoverable comment failure.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

import httpx
from wcmatch import glob as wcglob

from ...core.videos.comments import COMMENT_PAGE_SIZE
from ...core.videos.errors import CommentHostError, DiffProviderError, VideoPublishError
from ...core.videos.models import ChangedSpec, Comment, PullRequestRef

logger = logging.getLogger(__name__)

T = TypeVar("T")

GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"

FILES_PAGE_SIZE = 100
# GitHub stops listing pull request files at 3000
MAX_FILES_PAGES = 30

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)

SPEC_GLOB_FLAGS = wcglob.GLOBSTAR | wcglob.BRACE


@dataclass
class GitHubConfig:
    """Configuration for the GitHub client."""
    token: str
    api_url: str = GITHUB_API_URL
    retries: int = 3

    def __post_init__(self) -> None:
        if not self.token:
            raise ValueError("GitHub token is required")


def matches_spec_pattern(filename: str, spec_pattern: str) -> bool:
    """Glob match with ** and {a,b} support, like the patterns Cypress uses."""
    return wcglob.globmatch(filename, spec_pattern, flags=SPEC_GLOB_FLAGS)


class GitHubClient:
    """
    Thin async wrapper over the REST endpoints the pipeline needs.

    Use as an async context manager so the connection pool is closed:

        async with GitHubClient(config) as github:
            specs = await github.list_changed_specs(pull_request, pattern)
    """

    def __init__(
        self,
        config: GitHubConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.api_url,
            headers={
                "Authorization": f"Bearer {config.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
            timeout=DEFAULT_TIMEOUT,
            transport=transport or httpx.AsyncHTTPTransport(retries=config.retries),
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # -----------------------------------------------------------------------
    # Diff provider
    # -----------------------------------------------------------------------

    async def list_changed_specs(
        self,
        pull_request: PullRequestRef,
        spec_pattern: str,
    ) -> list[ChangedSpec]:
        """
        Files changed in the pull request that match spec_pattern.

        Deleted files are skipped since they can't have a video. Order
        follows the pull request diff.
        """
        path = f"/repos/{pull_request.owner}/{pull_request.repo}/pulls/{pull_request.number}/files"
        specs = []

        for page in range(1, MAX_FILES_PAGES + 1):
            files = await self._request_json(
                "GET",
                path,
                DiffProviderError,
                lambda data: [(item["filename"], item.get("status")) for item in data],
                params={"per_page": FILES_PAGE_SIZE, "page": page},
            )

            for filename, status in files:
                # Skip deleted files - no video will exist
                if status == "removed":
                    continue
                if matches_spec_pattern(filename, spec_pattern):
                    specs.append(ChangedSpec(path=filename))

            if len(files) < FILES_PAGE_SIZE:
                break
        else:
            logger.warning(
                "PR diff exceeds %d files, proceeding with what we have.",
                MAX_FILES_PAGES * FILES_PAGE_SIZE,
            )

        logger.info(
            'Found %d changed spec file(s) matching "%s"',
            len(specs),
            spec_pattern,
        )
        return specs

    # -----------------------------------------------------------------------
    # Comment host
    # -----------------------------------------------------------------------

    async def list_comments(
        self,
        pull_request: PullRequestRef,
        page: int,
        per_page: int = COMMENT_PAGE_SIZE,
    ) -> list[Comment]:
        """One page of issue comments on the pull request."""
        return await self._request_json(
            "GET",
            self._issue_comments_path(pull_request),
            CommentHostError,
            lambda data: [Comment(id=item["id"], body=item.get("body") or "") for item in data],
            params={"per_page": per_page, "page": page},
        )

    async def create_comment(
        self,
        pull_request: PullRequestRef,
        body: str,
    ) -> int:
        """Create an issue comment and return its id."""
        return await self._request_json(
            "POST",
            self._issue_comments_path(pull_request),
            CommentHostError,
            lambda data: int(data["id"]),
            json={"body": body},
        )

    async def update_comment(
        self,
        pull_request: PullRequestRef,
        comment_id: int,
        body: str,
    ) -> None:
        """Replace an issue comment's body."""
        await self._request(
            "PATCH",
            f"/repos/{pull_request.owner}/{pull_request.repo}/issues/comments/{comment_id}",
            CommentHostError,
            json={"body": body},
        )

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _issue_comments_path(self, pull_request: PullRequestRef) -> str:
        return f"/repos/{pull_request.owner}/{pull_request.repo}/issues/{pull_request.number}/comments"

    async def _request(
        self,
        method: str,
        path: str,
        error_cls: type[VideoPublishError],
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, raising error_cls for transport or HTTP status failures."""
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.debug(
                "GitHub API error",
                extra={"method": method, "path": path, "status": e.response.status_code}
            )
            raise error_cls(
                f"GitHub API {method} {path} failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise error_cls(f"GitHub API {method} {path} failed: {e}") from e

        return response

    async def _request_json(
        self,
        method: str,
        path: str,
        error_cls: type[VideoPublishError],
        extract: Callable[[Any], T],
        **kwargs: Any,
    ) -> T:
        """
        Send a request and pull the needed fields out of its JSON body.

        A body that isn't JSON or lacks the expected fields raises
        error_cls, the same as a failed request.
        """
        response = await self._request(method, path, error_cls, **kwargs)

        try:
            return extract(response.json())
        except (ValueError, KeyError, TypeError) as e:
            raise error_cls(
                f"GitHub API {method} {path} returned an unexpected response: {e}"
            ) from e
