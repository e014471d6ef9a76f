"""
Filename grammar shared by job planning (to generate names) and renumbering (to parse them).

Burst files, as written by ffmpeg for one windowed job:
    burst-<job_id>-keyframe-<center_frame>-frame-<sequence_offset>.<ext>
Canonical files, after renumbering or from whole-video extraction:
    frame.<absolute_frame>.<ext>
"""

from dataclasses import dataclass
import re
from typing import Optional

BURST_PREFIX = "burst"
CENTER_TAG = "keyframe"
SEQUENCE_TAG = "frame"
FIELD_SEP = "-"

CANONICAL_PREFIX = "frame"
CANONICAL_SEP = "."

_BURST_RE = re.compile(
    rf"^{BURST_PREFIX}{re.escape(FIELD_SEP)}(?P<job_id>\d+)"
    rf"{re.escape(FIELD_SEP)}{CENTER_TAG}{re.escape(FIELD_SEP)}(?P<center>\d+)"
    rf"{re.escape(FIELD_SEP)}{SEQUENCE_TAG}{re.escape(FIELD_SEP)}(?P<offset>\d+)"
    rf"\.(?P<ext>[A-Za-z0-9]+)$"
)
_CANONICAL_RE = re.compile(
    rf"^{CANONICAL_PREFIX}{re.escape(CANONICAL_SEP)}(?P<frame>\d+)\.(?P<ext>[A-Za-z0-9]+)$"
)


@dataclass(frozen=True)
class BurstName:
    job_id: int
    center_frame: int
    sequence_offset: int
    extension: str


@dataclass(frozen=True)
class CanonicalName:
    absolute_frame: int
    extension: str


def sequence_width(frame_count: int) -> int:
    """Digits needed to number a burst of `frame_count` frames (minimum 1)."""
    return max(1, len(str(frame_count)))


def burst_template(job_id: int, center_frame: int, frame_count: int, extension: str) -> str:
    """ffmpeg output template for one windowed job."""
    fields = [BURST_PREFIX, str(job_id), CENTER_TAG, str(center_frame), SEQUENCE_TAG]
    placeholder = f"%0{sequence_width(frame_count)}d"

    return f"{FIELD_SEP.join(fields)}{FIELD_SEP}{placeholder}.{extension}"


def all_frames_template(total_frames: int, extension: str) -> str:
    """
    ffmpeg output template for whole-video extraction, already in canonical form.

    Padded to the last frame index, matching the width renumbering would pick.
    """
    placeholder = f"%0{sequence_width(max(total_frames - 1, 0))}d"

    return f"{CANONICAL_PREFIX}{CANONICAL_SEP}{placeholder}.{extension}"


def canonical_name(absolute_frame: int, width: int, extension: str) -> str:
    return f"{CANONICAL_PREFIX}{CANONICAL_SEP}{absolute_frame:0{width}d}.{extension}"


def parse_burst_name(filename: str) -> Optional[BurstName]:
    match = _BURST_RE.match(filename)
    if match is None:
        return None

    return BurstName(
        job_id=int(match["job_id"]),
        center_frame=int(match["center"]),
        sequence_offset=int(match["offset"]),
        extension=match["ext"],
    )


def parse_canonical_name(filename: str) -> Optional[CanonicalName]:
    match = _CANONICAL_RE.match(filename)
    if match is None:
        return None

    return CanonicalName(absolute_frame=int(match["frame"]), extension=match["ext"])
