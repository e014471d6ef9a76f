"""Shared pytest fixtures for the frame extraction and publishing tests."""

import threading
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np
import pytest

from scene_frames.extract_and_publish_frames import FramePublishingContext, OutputFile
from scene_frames.utils import StorageClient


def write_image(path: Path, width: int = 64, height: int = 48, value: int = 128) -> Path:
    """Write a small solid-color image that OpenCV can read back."""
    img = np.full((height, width, 3), value, dtype=np.uint8)
    assert cv2.imwrite(str(path), img)
    return path


class FakeExtractor:
    """Stand-in for ffmpeg that writes the frames a real invocation would produce."""

    def __init__(self, fail_centers: Optional[set] = None, all_frames_status: int = 0):
        self.fail_centers = fail_centers or set()
        self.all_frames_status = all_frames_status
        self.window_calls: List[tuple] = []
        self.all_calls: List[tuple] = []
        self._lock = threading.Lock()

    def extract_window(self, video_path, seek_timecode, frame_count, output_pattern) -> int:
        with self._lock:
            self.window_calls.append((video_path, seek_timecode, frame_count, output_pattern))

        name = Path(output_pattern).name
        if any(f"-keyframe-{c}-" in name for c in self.fail_centers):
            return 1

        # ffmpeg numbers image sequences from 1
        for i in range(1, frame_count + 1):
            write_image(Path(str(output_pattern) % i))
        return 0

    def extract_all(self, video_path, fps, total_frames, output_pattern) -> int:
        self.all_calls.append((video_path, fps, total_frames, output_pattern))

        if self.all_frames_status != 0:
            return self.all_frames_status

        for i in range(total_frames):
            write_image(Path(str(output_pattern) % i))
        return 0


class FailingStorage:
    """Wraps a storage client and fails uploads for selected filenames."""

    def __init__(self, inner: StorageClient, failing_names: set):
        self.inner = inner
        self.failing_names = failing_names

    def put_bytes(self, key: str, data: bytes, content_type: str) -> str:
        if key.rsplit("/", 1)[-1] in self.failing_names:
            raise ConnectionError(f"upload refused for {key}")
        return self.inner.put_bytes(key, data, content_type)


@pytest.fixture
def video_path(tmp_path: Path) -> Path:
    """Placeholder input video; extraction is faked so it is never decoded."""
    path = tmp_path / "episode_01.mp4"
    path.write_bytes(b"\x00" * 16)
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "frames"
    path.mkdir()
    return path


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def memory_storage(tmp_path: Path) -> StorageClient:
    """In-memory blob store, namespaced per test."""
    return StorageClient.from_config(
        {"type": "memory", "base_data_dir": f"bucket-{tmp_path.name}", "fs_kwargs": {}}
    )


@pytest.fixture
def make_context(video_path: Path, output_dir: Path, fake_extractor: FakeExtractor):
    """Factory building a context with test defaults that can be overridden."""

    def _make(**overrides) -> FramePublishingContext:
        params = dict(
            video_path=video_path,
            output_dir=output_dir,
            fps=24.0,
            window_radius=2,
            concurrency=4,
            extractor=fake_extractor,
        )
        params.update(overrides)
        return FramePublishingContext(**params)

    return _make


@pytest.fixture
def canonical_frames(output_dir: Path) -> List[OutputFile]:
    """Ten renumbered frames ready to publish."""
    return [
        OutputFile(path=write_image(output_dir / f"frame.{i:03d}.jpg"), absolute_frame=i)
        for i in range(100, 110)
    ]
