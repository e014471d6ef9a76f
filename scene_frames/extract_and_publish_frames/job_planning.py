import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Union

from .exceptions import MissingTotalFramesError
from .frame_naming import all_frames_template, burst_template
from .types import ExtractionJob, ExtractionMode, FramePublishingContext, SceneDescriptor

logger = logging.getLogger(__name__)

Descriptors = Union[Sequence[SceneDescriptor], Sequence[int]]


def _to_scene_descriptor(raw: Mapping[str, Any], position: int) -> SceneDescriptor:
    """Build a scene descriptor from a JSON object using camelCase or snake_case keys."""
    try:
        start = raw["startFrame"] if "startFrame" in raw else raw["start_frame"]
        end = raw["endFrame"] if "endFrame" in raw else raw["end_frame"]
    except KeyError as e:
        raise ValueError(f"Scene {position} is missing key {e}") from e

    scene_id = raw.get("id", raw.get("scene_id", position))

    return SceneDescriptor(scene_id=str(scene_id), start_frame=int(start), end_frame=int(end))


def load_frame_descriptors(data_path: Path) -> Union[List[SceneDescriptor], List[int]]:
    """
    Load scene or frame descriptors from a JSON data file.

    The file holds either a list of scene objects with startFrame/endFrame keys or a
    flat list of frame numbers.
    """
    logger.info(f"Loading frame descriptors from: {data_path}")

    try:
        with open(data_path, "r") as f:
            raw = json.load(f)
    except FileNotFoundError:
        logger.error(f"Descriptor file not found at {data_path}")
        raise
    except json.JSONDecodeError as e:
        logger.error(f"Error parsing descriptor file: {e}")
        raise

    if not isinstance(raw, list):
        raise ValueError(f"Descriptor file must hold a JSON list, got {type(raw).__name__}")

    if all(isinstance(item, int) and not isinstance(item, bool) for item in raw):
        logger.info(f"Loaded {len(raw)} frame numbers")
        return list(raw)

    if all(isinstance(item, Mapping) for item in raw):
        scenes = [_to_scene_descriptor(item, i) for i, item in enumerate(raw)]
        logger.info(f"Loaded {len(scenes)} scene descriptors")
        return scenes

    raise ValueError("Descriptor file must hold only scene objects or only frame numbers")


def _plan_scene_jobs(
    scenes: Sequence[SceneDescriptor], window_radius: int, extension: str
) -> List[ExtractionJob]:
    frame_count = 2 * window_radius + 1
    jobs = []

    for scene in scenes:
        for center in (scene.start_frame, scene.end_frame):
            if center < 0:
                raise ValueError(f"Scene {scene.scene_id} has negative frame {center}")

            job_id = len(jobs)
            jobs.append(
                ExtractionJob(
                    job_id=job_id,
                    center_frame=center,
                    window_radius=window_radius,
                    output_template=burst_template(job_id, center, frame_count, extension),
                )
            )

    return jobs


def _plan_frame_list_jobs(
    frames: Sequence[int], window_radius: int, extension: str
) -> List[ExtractionJob]:
    frame_count = 2 * window_radius + 1
    jobs = []

    for job_id, frame in enumerate(frames):
        if frame < 0:
            raise ValueError(f"Frame numbers must be >= 0, got {frame}")

        if frame < window_radius:
            logger.debug(f"Window around frame {frame} starts before frame 0, anchoring at 0")

        jobs.append(
            ExtractionJob(
                job_id=job_id,
                center_frame=frame,
                window_radius=window_radius,
                output_template=burst_template(job_id, frame, frame_count, extension),
            )
        )

    return jobs


def plan_jobs(
    descriptors: Descriptors,
    window_radius: int,
    mode: ExtractionMode = ExtractionMode.WINDOWED,
    total_frames: Optional[int] = None,
    extension: str = "jpg",
) -> List[ExtractionJob]:
    """
    Expand scene or frame descriptors into an ordered list of extraction jobs.

    Scenes produce two jobs each (start, end) in descriptor order; a flat frame list
    produces one job per frame. All-frames mode ignores descriptors and plans a single
    whole-video job.

    Args:
        descriptors: Scene descriptors or plain frame numbers
        window_radius: Frames to extract on each side of every target frame
        mode: Windowed or all-frames extraction
        total_frames: Frame count of the whole-video job, required for all-frames mode
        extension: Image extension of the produced frames
    Returns:
        List[ExtractionJob]: Jobs in emission order, job ids matching positions
    """
    mode = ExtractionMode(mode)

    if mode is ExtractionMode.ALL_FRAMES:
        if total_frames is None:
            raise MissingTotalFramesError("All-frames mode requires total_frames")

        logger.info(f"Planned whole-video extraction of {total_frames} frames")
        return [
            ExtractionJob(
                job_id=0,
                center_frame=0,
                window_radius=0,
                output_template=all_frames_template(total_frames, extension),
                total_frames=total_frames,
            )
        ]

    if window_radius < 0:
        raise ValueError(f"Window radius must be >= 0, got {window_radius}")

    if all(isinstance(d, SceneDescriptor) for d in descriptors):
        jobs = _plan_scene_jobs(descriptors, window_radius, extension)
    elif all(isinstance(d, int) for d in descriptors):
        jobs = _plan_frame_list_jobs(descriptors, window_radius, extension)
    else:
        raise ValueError("Descriptors must be all scene descriptors or all frame numbers")

    logger.info(
        f"Planned {len(jobs)} extraction jobs of {2 * window_radius + 1} frames "
        f"from {len(descriptors)} descriptors"
    )
    return jobs


def plan_jobs_for_context(ctx: FramePublishingContext) -> List[ExtractionJob]:
    descriptors = ctx.scenes if ctx.scenes else ctx.frames

    return plan_jobs(
        descriptors,
        ctx.window_radius,
        mode=ctx.mode,
        total_frames=ctx.total_frames,
        extension=ctx.image_extension,
    )
