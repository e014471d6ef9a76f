# extract_and_publish_frames/__init__.py
from .exceptions import (
    FrameExtractionError,
    FramePipelineError,
    InvalidRateError,
    MalformedOutputNameError,
    MissingTotalFramesError,
)
from .frame_extraction import extract_all_frames, run_extraction, run_job
from .frame_publishing import publish_frames, resize_image
from .frame_renumbering import renumber_frames
from .job_planning import load_frame_descriptors, plan_jobs, plan_jobs_for_context
from .progress_tracking import ProgressTracker, Stage
from .task_running import TaskResult, run_all
from .timecode_conversion import frame_to_timecode
from .types import (
    ExtractionJob,
    ExtractionMode,
    Failure,
    FailureKind,
    FailureSet,
    FramePublishingContext,
    JobResult,
    OutputFile,
    RunSummary,
    SceneDescriptor,
)
from .video_processing import extract_and_publish_frames

__all__ = [
    # Errors
    "FramePipelineError",
    "InvalidRateError",
    "MissingTotalFramesError",
    "MalformedOutputNameError",
    "FrameExtractionError",
    # Planning
    "frame_to_timecode",
    "load_frame_descriptors",
    "plan_jobs",
    "plan_jobs_for_context",
    # Execution
    "run_all",
    "TaskResult",
    "run_job",
    "run_extraction",
    "extract_all_frames",
    "renumber_frames",
    "resize_image",
    "publish_frames",
    "ProgressTracker",
    "Stage",
    # Pipeline
    "extract_and_publish_frames",
    # Data types
    "ExtractionJob",
    "ExtractionMode",
    "Failure",
    "FailureKind",
    "FailureSet",
    "FramePublishingContext",
    "JobResult",
    "OutputFile",
    "RunSummary",
    "SceneDescriptor",
]
