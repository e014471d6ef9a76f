from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from scene_frames.utils import FfmpegExtractor, StorageClient

from .exceptions import InvalidRateError, MissingTotalFramesError


class ExtractionMode(str, Enum):
    WINDOWED = "windowed"
    ALL_FRAMES = "all-frames"


@dataclass(frozen=True)
class SceneDescriptor:
    scene_id: str
    start_frame: int
    end_frame: int


@dataclass(frozen=True)
class ExtractionJob:
    """
    One ffmpeg invocation.

    Attributes:
        job_id (int): Position of the job in the planned batch, unique per batch.
        center_frame (int): Frame the burst is built around.
        window_radius (int): Frames requested on each side of the center.
        output_template (str): ffmpeg output filename with a %0Nd sequence placeholder.
        total_frames (int | None): Set only for the whole-video job.
    """

    job_id: int
    center_frame: int
    window_radius: int
    output_template: str
    total_frames: Optional[int] = None

    @property
    def is_whole_video(self) -> bool:
        return self.total_frames is not None

    @property
    def frame_count(self) -> int:
        if self.is_whole_video:
            return self.total_frames
        return 2 * self.window_radius + 1

    @property
    def start_frame(self) -> int:
        """First frame of the burst. Windows reaching before frame 0 are anchored at 0."""
        return max(self.center_frame - self.window_radius, 0)


@dataclass(frozen=True)
class JobResult:
    job: ExtractionJob
    succeeded: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class OutputFile:
    path: Path
    absolute_frame: int
    center_frame: Optional[int] = None
    sequence_offset: Optional[int] = None

    @property
    def name(self) -> str:
        return self.path.name


class FailureKind(str, Enum):
    EXTRACTION = "extraction"
    RESIZE = "resize"
    UPLOAD = "upload"
    DELETE = "delete"


@dataclass(frozen=True)
class Failure:
    identifier: str
    kind: FailureKind
    cause: str


@dataclass
class FailureSet:
    """Recoverable failures collected across every stage of a run."""

    items: List[Failure] = field(default_factory=list)

    def add(self, identifier: str, kind: FailureKind, cause: str) -> None:
        self.items.append(Failure(identifier, kind, cause))

    def extend(self, other: "FailureSet") -> None:
        self.items.extend(other.items)

    def of_kind(self, kind: FailureKind) -> List[Failure]:
        return [failure for failure in self.items if failure.kind is kind]

    def identifiers(self, kind: Optional[FailureKind] = None) -> List[str]:
        return [f.identifier for f in self.items if kind is None or f.kind is kind]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Failure]:
        return iter(self.items)


@dataclass
class StageStats:
    attempted: int = 0
    succeeded: int = 0

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded


@dataclass
class RunSummary:
    """Per-stage counters and itemized failures reported at the end of a run."""

    stages: Dict[str, StageStats] = field(default_factory=dict)
    failures: FailureSet = field(default_factory=FailureSet)
    published_frames: int = 0

    def record(self, stage: str, attempted: int, succeeded: int) -> None:
        self.stages[stage] = StageStats(attempted, succeeded)

    @property
    def succeeded_count(self) -> int:
        """Frames that made it through resizing and, when enabled, upload."""
        return self.published_frames

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    def log_summary(self, logger) -> None:
        """Log per-stage counters and every recorded failure."""
        logger.info("Run statistics:")
        for stage, stats in self.stages.items():
            logger.info(f"  - {stage}: {stats.succeeded}/{stats.attempted} succeeded")
        logger.info(f"  - Frames published: {self.succeeded_count}")
        logger.info(f"  - Failures: {self.failed_count}")

        for failure in self.failures:
            logger.warning(f"  [{failure.kind.value}] {failure.identifier}: {failure.cause}")


@dataclass(frozen=True)
class FramePublishingContext:
    video_path: Path
    output_dir: Path
    fps: float = 23.976
    window_radius: int = 5
    concurrency: int = 8
    mode: ExtractionMode = ExtractionMode.WINDOWED
    scenes: List[SceneDescriptor] = field(default_factory=list)
    frames: List[int] = field(default_factory=list)
    total_frames: Optional[int] = None

    target_width: Optional[int] = None
    image_extension: str = "jpg"

    push_to_cloud: bool = False
    delete_after_upload: bool = True
    video_id: Optional[str] = None

    extractor: Any = field(default_factory=FfmpegExtractor)
    storage: Optional[StorageClient] = None

    def __post_init__(self):
        # Normalize loosely typed values coming from YAML
        object.__setattr__(self, "video_path", Path(self.video_path))
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        object.__setattr__(self, "mode", ExtractionMode(self.mode))
        object.__setattr__(self, "image_extension", self.image_extension.lstrip("."))

        if self.video_id is None:
            object.__setattr__(self, "video_id", self.video_path.stem)

        if self.fps <= 0:
            raise InvalidRateError(f"Frame rate must be positive, got {self.fps}")

        if self.window_radius < 0:
            raise ValueError(f"Window radius must be >= 0, got {self.window_radius}")

        if self.concurrency < 0:
            raise ValueError(f"Concurrency must be >= 0, got {self.concurrency}")

        if self.target_width is not None and self.target_width <= 0:
            raise ValueError(f"Target width must be positive, got {self.target_width}")

        if self.mode is ExtractionMode.ALL_FRAMES:
            if self.total_frames is None:
                raise MissingTotalFramesError("All-frames mode requires total_frames")
            if self.total_frames <= 0:
                raise ValueError(f"Total frames must be positive, got {self.total_frames}")

        if self.mode is ExtractionMode.WINDOWED and self.scenes and self.frames:
            raise ValueError("Provide either scene descriptors or a frame list, not both")

        if self.push_to_cloud and self.storage is None:
            raise ValueError("Uploading requires a storage client")

    @property
    def upload_prefix(self) -> str:
        return f"video.{self.video_id}"
