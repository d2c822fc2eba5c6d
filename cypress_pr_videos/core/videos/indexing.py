"""
Linking changed specs to recorded videos.

Cypress writes one video per spec under the video directory, mirroring
the spec's path relative to the spec root:

    cypress/e2e/auth/login.cy.ts  ->  cypress/videos/auth/login.cy.ts.mp4

The spec root differs between projects (standard layout, monorepo
subpackages, custom roots), so instead of stripping known prefixes we
match on path suffixes: the spec path must end with the video key at a
path boundary. When several keys match, the longest one wins:

    spec:   apps/web/cypress/e2e/auth/login.cy.ts
    keys:   login.cy.ts, auth/login.cy.ts
    match:  auth/login.cy.ts
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Optional, Union

from .models import VIDEO_SUFFIX, ChangedSpec, Match

logger = logging.getLogger(__name__)

VideoIndex = dict[str, Path]


def index_videos(video_root: Union[str, Path]) -> VideoIndex:
    """
    Walk the video directory and index every .mp4 file.

    Keys are paths relative to the root with POSIX separators and the
    .mp4 suffix stripped; values are the files' full paths. A missing
    or empty directory yields an empty index; a pipeline that recorded
    no videos is not an error.
    """
    root = Path(video_root)
    videos: VideoIndex = {}

    if not root.exists():
        logger.warning("Video directory does not exist: %s", root)
        return videos

    if not root.is_dir():
        logger.warning("Video path is not a directory: %s", root)
        return videos

    for path in root.rglob("*"):
        if not path.name.endswith(VIDEO_SUFFIX) or not path.is_file():
            continue
        relative = path.relative_to(root).as_posix()
        videos[relative[: -len(VIDEO_SUFFIX)]] = path

    logger.debug(
        "Indexed video directory",
        extra={"video_dir": str(root), "count": len(videos)}
    )
    return videos


def find_matching_video(spec_path: str, index: VideoIndex) -> Optional[Match]:
    """
    Resolve the video recorded for a spec, or None if there isn't one.

    A key matches when it equals the spec path or is a suffix of it
    starting right after a path separator. Both '/' and the platform
    separator count as boundaries.
    """
    best: Optional[Match] = None

    for video_key, video_path in index.items():
        if not (
            spec_path == video_key
            or spec_path.endswith("/" + video_key)
            or spec_path.endswith(os.sep + video_key)
        ):
            continue
        if best is None or len(video_key) > len(best.video_key):
            best = Match(spec_path=spec_path, video_key=video_key, video_path=video_path)

    return best


def match_specs(specs: Iterable[ChangedSpec], index: VideoIndex) -> list[Match]:
    """
    Match each changed spec against the index, keeping spec order.

    Specs without a video are reported and skipped; the test may not
    have run, or recording may be disabled for it.
    """
    matches = []

    for spec in specs:
        match = find_matching_video(spec.path, index)
        if match is None:
            logger.warning(
                "No video found for %s. Available videos: [%s]",
                spec.path,
                ", ".join(index.keys()),
            )
            continue
        matches.append(match)

    return matches
