import math

from .exceptions import InvalidRateError


def frame_to_timecode(frame_index: int, fps: float) -> str:
    """
    Convert a frame index into an ffmpeg seek position.

    Milliseconds are floored so the seek never lands after the frame's timestamp.
    Negative indices are kept as negative timecodes; clamping is up to the caller.

    Args:
        frame_index: Frame number, may be negative
        fps: Frame rate of the video
    Returns:
        str: Timecode in "H:MM:SS.mmm" form, prefixed with "-" for negative input
    """
    if fps <= 0:
        raise InvalidRateError(f"Frame rate must be positive, got {fps}")

    total_ms = math.floor(abs(frame_index) * 1000 / fps)
    sign = "-" if frame_index < 0 and total_ms > 0 else ""

    hours, rem = divmod(total_ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    seconds, millis = divmod(rem, 1000)

    return f"{sign}{hours}:{minutes:02d}:{seconds:02d}.{millis:03d}"
