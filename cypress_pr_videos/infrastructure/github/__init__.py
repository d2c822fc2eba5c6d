"""
GitHub integration.

The REST client implements the DiffProvider and CommentHost protocols
from core.videos; the actions module handles the workflow runtime.
"""

from .actions import PullRequestContext, load_pull_request_context, set_failed, set_output
from .client import GitHubClient, GitHubConfig, matches_spec_pattern

__all__ = [
    "GitHubClient",
    "GitHubConfig",
    "PullRequestContext",
    "load_pull_request_context",
    "matches_spec_pattern",
    "set_failed",
    "set_output",
]
