"""
Linking changed Cypress specs to recorded videos and publishing them.

Contains the domain models, the spec/video matcher, the upload
orchestrator, and the pull request comment logic.
"""

from .comments import (
    COMMENT_MARKER,
    CommentHost,
    CommentUpserter,
    build_comment_body,
    display_name,
)
from .errors import (
    CommentHostError,
    DiffProviderError,
    ObjectStoreError,
    VideoPublishError,
)
from .indexing import VideoIndex, find_matching_video, index_videos, match_specs
from .models import (
    ChangedSpec,
    Comment,
    CommentAction,
    DisplayMode,
    Match,
    PullRequestRef,
    UploadResult,
)
from .publisher import DiffProvider, PublishOptions, VideoPublisher
from .uploads import ObjectStore, VideoUploader

__all__ = [
    "COMMENT_MARKER",
    "ChangedSpec",
    "Comment",
    "CommentAction",
    "CommentHost",
    "CommentHostError",
    "CommentUpserter",
    "DiffProvider",
    "DiffProviderError",
    "DisplayMode",
    "Match",
    "ObjectStore",
    "ObjectStoreError",
    "PublishOptions",
    "PullRequestRef",
    "UploadResult",
    "VideoIndex",
    "VideoPublishError",
    "VideoPublisher",
    "VideoUploader",
    "build_comment_body",
    "display_name",
    "find_matching_video",
    "index_videos",
    "match_specs",
]
