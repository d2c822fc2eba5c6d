"""
The pull request comment that links to uploaded videos.

Each run keeps exactly one comment on the pull request up to date.
The comment is recognised by a hidden marker at the start of its body;
nothing else about the body is ever parsed back.
"""

import logging
import math
from typing import Optional, Protocol, Sequence

from .errors import CommentHostError
from .models import Comment, CommentAction, DisplayMode, PullRequestRef, UploadResult

logger = logging.getLogger(__name__)

COMMENT_MARKER = "<!-- cypress-pr-videos -->"

COMMENT_PAGE_SIZE = 100
MAX_COMMENT_PAGES = 50


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class CommentHost(Protocol):
    """
    Interface for a service that stores pull request comments.

    Pages are 1-based. Failures surface as CommentHostError.
    """

    async def list_comments(
        self,
        pull_request: PullRequestRef,
        page: int,
        per_page: int = COMMENT_PAGE_SIZE,
    ) -> list[Comment]:
        """Return one page of comments, oldest first."""
        ...

    async def create_comment(
        self,
        pull_request: PullRequestRef,
        body: str,
    ) -> int:
        """Create a comment and return its id."""
        ...

    async def update_comment(
        self,
        pull_request: PullRequestRef,
        comment_id: int,
        body: str,
    ) -> None:
        """Replace the body of an existing comment."""
        ...


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def display_name(spec_path: str) -> str:
    """Short name for a spec: its last two path segments."""
    return "/".join(spec_path.split("/")[-2:])


def _expiry_hours(expiry_seconds: int) -> int:
    # half-up, so 1.5 hours shows as 2
    return int(math.floor(expiry_seconds / 3600 + 0.5))


def _render_inline(results: Sequence[UploadResult]) -> str:
    blocks = []
    for result in results:
        blocks.append(
            "<details open>\n"
            f"<summary><strong>{display_name(result.spec)}</strong></summary>\n"
            "\n"
            f"{result.url}\n"
            "\n"
            "</details>"
        )
    return "\n\n".join(blocks)


def _render_table(results: Sequence[UploadResult]) -> str:
    rows = [
        f"| `{display_name(result.spec)}` | [▶️ Watch]({result.url}) |"
        for result in results
    ]
    return "\n".join(["| Spec | Video |", "|---|---|", *rows])


def build_comment_body(
    header: str,
    results: Sequence[UploadResult],
    expiry_seconds: int,
    display_mode: DisplayMode = DisplayMode.INLINE,
) -> str:
    """
    Render the comment body.

    Deterministic for a given input, so re-running with the same
    results produces the same comment. The expiry is stated in whole
    hours without pluralisation ("1 hours").
    """
    if display_mode is DisplayMode.TABLE:
        videos = _render_table(results)
    else:
        videos = _render_inline(results)

    return (
        f"{COMMENT_MARKER}\n"
        f"{header}\n"
        "\n"
        f"{videos}\n"
        "\n"
        f"> Videos expire {_expiry_hours(expiry_seconds)} hours after upload."
    )


# ---------------------------------------------------------------------------
# Upsert
# ---------------------------------------------------------------------------

class CommentUpserter:
    """
    Creates or updates the single marked comment on a pull request.

    Per run the comment goes from "not found" to CREATED, or from
    "found" to UPDATED. Nothing else happens to it.
    """

    def __init__(
        self,
        host: CommentHost,
        page_size: int = COMMENT_PAGE_SIZE,
        max_pages: int = MAX_COMMENT_PAGES,
    ) -> None:
        self._host = host
        self._page_size = page_size
        self._max_pages = max_pages

    async def find_marked_comment(
        self,
        pull_request: PullRequestRef,
    ) -> Optional[Comment]:
        """
        Scan comment pages for the first body containing the marker.

        Stops at the first hit, at an empty or short page, or after
        max_pages pages.
        """
        for page in range(1, self._max_pages + 1):
            comments = await self._host.list_comments(pull_request, page, self._page_size)

            for comment in comments:
                if COMMENT_MARKER in comment.body:
                    return comment

            if len(comments) < self._page_size:
                return None

        logger.warning(
            "Stopped searching for the video comment after %d pages",
            self._max_pages,
            extra={"pull_request": pull_request.number}
        )
        return None

    async def upsert(
        self,
        pull_request: PullRequestRef,
        results: Sequence[UploadResult],
        header: str,
        expiry_seconds: int,
        display_mode: DisplayMode = DisplayMode.INLINE,
    ) -> Optional[CommentAction]:
        """
        Publish the video links, updating the marked comment if present.

        Does nothing when there are no results. Comment host failures
        are logged and reported as None; the uploads already succeeded
        and stay that way.
        """
        if not results:
            return None

        body = build_comment_body(header, results, expiry_seconds, display_mode)

        try:
            existing = await self.find_marked_comment(pull_request)

            if existing is not None:
                await self._host.update_comment(pull_request, existing.id, body)
                logger.info("Updated existing PR comment (id: %s)", existing.id)
                return CommentAction.UPDATED

            comment_id = await self._host.create_comment(pull_request, body)
            logger.info("Created new PR comment with video links (id: %s)", comment_id)
            return CommentAction.CREATED

        except CommentHostError as e:
            logger.error(
                "Failed to post PR comment: %s",
                e,
                extra={"pull_request": pull_request.number}
            )
            return None
