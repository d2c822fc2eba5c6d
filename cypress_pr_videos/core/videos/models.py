"""
Domain models for publishing Cypress videos to a pull request.

These are plain values. They don't know how specs are listed, where
videos are stored, or how comments are posted. That all lives in the
infrastructure layer behind the protocols in this package.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


VIDEO_SUFFIX = ".mp4"
VIDEO_CONTENT_TYPE = "video/mp4"


class DisplayMode(Enum):
    """How video links are laid out in the pull request comment."""
    INLINE = "inline"  # collapsible block per spec, raw URL
    TABLE = "table"    # markdown table with "Watch" links


class CommentAction(Enum):
    """What happened to the marked comment during a run."""
    CREATED = "created"
    UPDATED = "updated"


@dataclass(frozen=True)
class PullRequestRef:
    """
    Identifies the pull request a run is working on.

    Passed explicitly into every stage instead of being read from
    ambient CI context, so each stage can be exercised on its own.
    """
    owner: str
    repo: str
    number: int

    def __post_init__(self) -> None:
        if not self.owner or not self.repo:
            raise ValueError("owner and repo are required")
        if self.number < 1:
            raise ValueError("Pull request number must be positive")

    def object_key(self, video_key: str) -> str:
        """
        Storage key for a video uploaded from this pull request.

        Stable across re-runs, so a new upload for the same spec
        overwrites the previous object.
        """
        return f"cypress/{self.owner}/{self.repo}/pr-{self.number}/{video_key}{VIDEO_SUFFIX}"


@dataclass(frozen=True)
class ChangedSpec:
    """A test spec file changed in the pull request (repository-relative path)."""
    path: str


@dataclass(frozen=True)
class Match:
    """A changed spec paired with the recorded video it produced."""
    spec_path: str
    video_key: str
    video_path: Path


@dataclass(frozen=True)
class UploadResult:
    """A successfully uploaded video and its signed playback URL."""
    spec: str
    url: str

    def to_dict(self) -> dict[str, str]:
        return {"spec": self.spec, "url": self.url}


@dataclass(frozen=True)
class Comment:
    """The parts of a pull request comment we care about."""
    id: int
    body: str = ""
