from dataclasses import dataclass
import logging
import mimetypes
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .progress_tracking import ProgressTracker, Stage
from .task_running import TaskResult, run_all
from .types import FailureKind, FailureSet, FramePublishingContext, OutputFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileOutcome:
    output_file: OutputFile
    uploaded: bool = False
    failure_kind: Optional[FailureKind] = None
    error: Optional[str] = None


def resize_image(path: Path, target_width: Optional[int]) -> Tuple[np.ndarray, bool]:
    """
    Load an image and scale it to `target_width`, keeping the aspect ratio.

    Returns:
        Tuple[np.ndarray, bool]: The image and whether it was actually resized
    """
    image = cv2.imread(str(path))
    if image is None:
        raise ValueError(f"Could not read image: {path}")

    if target_width is None:
        return image, False

    h, w = image.shape[:2]
    if w == target_width:
        return image, False

    new_h = max(1, int(h * target_width / w))
    interpolation = cv2.INTER_AREA if target_width < w else cv2.INTER_LINEAR

    return cv2.resize(image, (target_width, new_h), interpolation=interpolation), True


def encode_image(image: np.ndarray, extension: str) -> bytes:
    ok, buffer = cv2.imencode(f".{extension}", image)
    if not ok:
        raise ValueError(f"Could not encode image as .{extension}")

    return buffer.tobytes()


def _content_type(filename: str) -> str:
    return mimetypes.guess_type(filename)[0] or "application/octet-stream"


def _publish_one(output_file: OutputFile, ctx: FramePublishingContext) -> FileOutcome:
    """
    Resize a frame, then upload it from memory or write it back in place.

    Frames that need no resizing are never re-encoded: they stay as they are on disk
    and their original bytes are uploaded.
    """
    try:
        image, resized = resize_image(output_file.path, ctx.target_width)
    except (ValueError, cv2.error) as e:
        logger.warning(f"Resize failed for {output_file.name}: {e}")
        return FileOutcome(output_file, failure_kind=FailureKind.RESIZE, error=str(e))

    if not ctx.push_to_cloud:
        if resized and not cv2.imwrite(str(output_file.path), image):
            logger.warning(f"Could not write resized frame {output_file.name}")
            return FileOutcome(
                output_file, failure_kind=FailureKind.RESIZE, error="could not write image"
            )
        return FileOutcome(output_file)

    key = f"{ctx.upload_prefix}/{output_file.name}"

    try:
        if resized:
            data = encode_image(image, output_file.path.suffix[1:])
        else:
            data = output_file.path.read_bytes()
    except (ValueError, cv2.error, OSError) as e:
        logger.warning(f"Encoding failed for {output_file.name}: {e}")
        return FileOutcome(output_file, failure_kind=FailureKind.RESIZE, error=str(e))

    try:
        ctx.storage.put_bytes(key, data, _content_type(output_file.name))
    except Exception as e:
        logger.warning(f"Upload failed for {output_file.name} to '{key}': {e}")
        return FileOutcome(output_file, failure_kind=FailureKind.UPLOAD, error=str(e))

    return FileOutcome(output_file, uploaded=True)


def _collect_outcomes(task_results: List[TaskResult]) -> List[FileOutcome]:
    outcomes = []
    for result in task_results:
        if result.succeeded:
            outcomes.append(result.value)
        else:
            outcomes.append(
                FileOutcome(result.task, failure_kind=FailureKind.RESIZE, error=str(result.error))
            )

    return outcomes


def _delete_uploaded(
    uploaded: Sequence[OutputFile],
    ctx: FramePublishingContext,
    failures: FailureSet,
    progress: Optional[ProgressTracker],
) -> None:
    """Delete local copies of uploaded frames."""
    logger.info(f"Deleting {len(uploaded)} uploaded frames from {ctx.output_dir}")

    def on_deleted(result: TaskResult, n_done: int, n_total: int) -> None:
        if progress is not None:
            progress.report(Stage.DELETE_IMAGES, n_done / n_total)

    task_results = run_all(uploaded, ctx.concurrency, lambda f: f.path.unlink(), on_deleted)

    for result in task_results:
        if not result.succeeded:
            logger.warning(f"Could not delete {result.task.name}: {result.error}")
            failures.add(result.task.name, FailureKind.DELETE, str(result.error))

    if progress is not None:
        progress.report(Stage.DELETE_IMAGES, 1.0)


def _remove_output_dir(
    ctx: FramePublishingContext, failures: FailureSet, progress: Optional[ProgressTracker]
) -> None:
    """
    Remove the temporary output directory.

    Removal is always attempted. A directory still holding frames kept after earlier
    failures stays in place and is recorded as a DELETE failure.
    """
    if ctx.output_dir.exists():
        remaining = list(ctx.output_dir.iterdir())

        try:
            ctx.output_dir.rmdir()
            logger.info(f"Removed output directory: {ctx.output_dir}")
        except OSError as e:
            if remaining:
                cause = f"{len(remaining)} files were not uploaded or deleted"
            else:
                cause = str(e)
            logger.warning(f"Could not remove output directory {ctx.output_dir}: {cause}")
            failures.add(str(ctx.output_dir), FailureKind.DELETE, cause)

    if progress is not None:
        progress.report(Stage.DELETE_DIR, 1.0)


def publish_frames(
    files: Sequence[OutputFile],
    ctx: FramePublishingContext,
    progress: Optional[ProgressTracker] = None,
) -> FailureSet:
    """
    Resize every frame and either upload it or overwrite it locally.

    Uploaded frames are deleted locally once the whole resize/upload batch has
    finished, then the output directory is removed. Failures are collected, never
    raised.

    Args:
        files: Renumbered frames to publish
        ctx: FramePublishingContext with target width, upload and storage settings
        progress: Optional tracker receiving process/delete progress
    Returns:
        FailureSet: Resize, upload and delete failures
    """
    failures = FailureSet()
    action = "Resizing and uploading" if ctx.push_to_cloud else "Resizing"
    logger.info(f"{action} {len(files)} frames")

    def on_published(result: TaskResult, n_done: int, n_total: int) -> None:
        if progress is not None:
            progress.report(Stage.PROCESS, n_done / n_total)

    task_results = run_all(files, ctx.concurrency, lambda f: _publish_one(f, ctx), on_published)
    outcomes = _collect_outcomes(task_results)

    for outcome in outcomes:
        if outcome.failure_kind is not None:
            failures.add(outcome.output_file.name, outcome.failure_kind, outcome.error)

    if progress is not None:
        progress.report(Stage.PROCESS, 1.0)

    logger.info(f"{action} finished: {len(files) - len(failures)}/{len(files)} succeeded")

    if not (ctx.push_to_cloud and ctx.delete_after_upload):
        return failures

    uploaded = [outcome.output_file for outcome in outcomes if outcome.uploaded]
    _delete_uploaded(uploaded, ctx, failures, progress)
    _remove_output_dir(ctx, failures, progress)

    return failures
