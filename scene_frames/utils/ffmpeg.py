"""ffmpeg invocation for frame-accurate burst and whole-video extraction."""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


def run_command(cmd: List[str], timeout: Optional[int] = None) -> subprocess.CompletedProcess:
    """Run an external command with logging. Never raises on non-zero exit."""
    cmd_str = " ".join(cmd)
    logger.debug(f"Running: {cmd_str}")

    result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout, check=False)

    if result.stderr:
        logger.debug(f"stderr: {result.stderr[-500:]}")
    if result.returncode != 0:
        logger.warning(f"Command exited with status {result.returncode}: {cmd_str}")

    return result


class FfmpegExtractor:
    """
    Thin wrapper building and running ffmpeg extraction commands.

    Attributes:
        binary (str): ffmpeg executable name or path.
        timeout (int | None): Seconds before a single invocation is killed.
    """

    def __init__(self, binary: str = "ffmpeg", timeout: Optional[int] = None):
        self.binary = binary
        self.timeout = timeout

    def _base_cmd(self) -> List[str]:
        return [self.binary, "-hide_banner", "-loglevel", "error", "-nostdin", "-y"]

    def build_window_cmd(
        self, video_path: Path, seek_timecode: str, frame_count: int, output_pattern: Path
    ) -> List[str]:
        """Build the command dumping `frame_count` frames starting at `seek_timecode`."""
        return self._base_cmd() + [
            "-ss", seek_timecode,
            "-i", str(video_path),
            "-frames:v", str(frame_count),
            str(output_pattern),
        ]

    def build_all_frames_cmd(
        self, video_path: Path, fps: float, total_frames: int, output_pattern: Path
    ) -> List[str]:
        """Build the command dumping every frame, numbered from 0."""
        return self._base_cmd() + [
            "-ss", "00:00:00",
            "-i", str(video_path),
            "-r", str(fps),
            "-frames:v", str(total_frames),
            "-start_number", "0",
            str(output_pattern),
        ]

    def extract_window(
        self, video_path: Path, seek_timecode: str, frame_count: int, output_pattern: Path
    ) -> int:
        cmd = self.build_window_cmd(video_path, seek_timecode, frame_count, output_pattern)
        return run_command(cmd, timeout=self.timeout).returncode

    def extract_all(
        self, video_path: Path, fps: float, total_frames: int, output_pattern: Path
    ) -> int:
        cmd = self.build_all_frames_cmd(video_path, fps, total_frames, output_pattern)
        return run_command(cmd, timeout=self.timeout).returncode
