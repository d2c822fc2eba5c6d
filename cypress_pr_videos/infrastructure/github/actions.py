"""
GitHub Actions runtime integration.

Reads the pull request the workflow was triggered for and talks back to
the runner through its file and stdout protocols. See
https://docs.github.com/actions/using-workflows/workflow-commands-for-github-actions
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
from uuid import uuid4

from ...core.videos.models import PullRequestRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PullRequestContext:
    """The pull request a workflow run belongs to."""
    pull_request: PullRequestRef
    is_fork: bool = False


def load_pull_request_context(
    event_path: Optional[Union[str, Path]],
    repository: str,
) -> Optional[PullRequestContext]:
    """
    Build the pull request context from the workflow event payload.

    Returns None when the run was not triggered by a pull request event.
    Raises ValueError if the repository name or payload is malformed.
    """
    if not event_path or not Path(event_path).is_file():
        logger.debug("No event payload available", extra={"event_path": str(event_path)})
        return None

    with open(event_path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    pr = payload.get("pull_request")
    if not pr:
        return None

    owner, _, repo = repository.partition("/")
    if not owner or not repo:
        raise ValueError(f"Invalid repository name: {repository!r}")

    head_repo = (pr.get("head") or {}).get("repo") or {}

    return PullRequestContext(
        pull_request=PullRequestRef(owner=owner, repo=repo, number=int(pr["number"])),
        is_fork=bool(head_repo.get("fork", False)),
    )


def set_output(
    name: str,
    value: str,
    output_path: Optional[Union[str, Path]] = None,
) -> None:
    """
    Set a step output.

    Appends to the GITHUB_OUTPUT file, using a heredoc delimiter for
    multi-line values. Without an output file the value is printed so
    local runs still show it.
    """
    output_path = output_path or os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        print(f"{name}={value}")
        return

    with open(output_path, "a", encoding="utf-8") as f:
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid4()}"
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            f.write(f"{name}={value}\n")


def set_failed(message: str) -> None:
    """Emit an error annotation; the caller exits non-zero."""
    escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    print(f"::error::{escaped}", flush=True)
