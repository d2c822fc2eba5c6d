"""
Error types raised across the publishing pipeline.

Collaborator implementations wrap their transport-specific failures in
these so the core can decide what is fatal and what is per-item.
"""


class VideoPublishError(Exception):
    """Base class for pipeline failures."""
    pass


class DiffProviderError(VideoPublishError):
    """Raised when the list of changed files can't be retrieved. Fatal for the run."""
    pass


class ObjectStoreError(VideoPublishError):
    """Raised when an upload or signed URL request fails."""
    pass


class CommentHostError(VideoPublishError):
    """Raised when listing, creating, or updating comments fails."""
    pass
