import logging
from typing import Callable, List, Optional

from .frame_extraction import extract_all_frames, run_extraction
from .frame_publishing import publish_frames
from .frame_renumbering import renumber_frames
from .job_planning import plan_jobs_for_context
from .progress_tracking import ProgressTracker, Stage
from .types import (
    ExtractionJob,
    ExtractionMode,
    FailureKind,
    FailureSet,
    FramePublishingContext,
    OutputFile,
    RunSummary,
)

logger = logging.getLogger(__name__)


def _prepare_output_dir(ctx: FramePublishingContext) -> None:
    """Create the output directory if needed."""
    logger.info(f"Output directory: {ctx.output_dir}")
    ctx.output_dir.mkdir(parents=True, exist_ok=True)


def _job_identifier(job: ExtractionJob) -> str:
    return f"burst {job.job_id} (frame {job.center_frame})"


def _extract(
    ctx: FramePublishingContext,
    jobs: List[ExtractionJob],
    summary: RunSummary,
    progress: ProgressTracker,
) -> None:
    """Run extraction; whole-video failures raise, windowed failures are recorded."""
    if ctx.mode is ExtractionMode.ALL_FRAMES:
        extract_all_frames(ctx, jobs[0])
        summary.record("extract", 1, 1)
        progress.report(Stage.EXTRACT, 1.0)
        return

    results = run_extraction(
        ctx, jobs, on_complete=lambda r, n_done, n_total: progress.report(Stage.EXTRACT, n_done / n_total)
    )

    for result in results:
        if not result.succeeded:
            summary.failures.add(_job_identifier(result.job), FailureKind.EXTRACTION, result.error)

    n_succeeded = sum(1 for r in results if r.succeeded)
    summary.record("extract", len(results), n_succeeded)
    progress.report(Stage.EXTRACT, 1.0)


def _publish(
    ctx: FramePublishingContext,
    files: List[OutputFile],
    summary: RunSummary,
    progress: ProgressTracker,
) -> None:
    """Publish frames and fold the outcome into the run summary."""
    failures: FailureSet = publish_frames(files, ctx, progress)
    summary.failures.extend(failures)

    n_unpublished = len(failures.of_kind(FailureKind.RESIZE)) + len(
        failures.of_kind(FailureKind.UPLOAD)
    )
    n_published = len(files) - n_unpublished

    summary.record("process", len(files), n_published)
    summary.published_frames = n_published

    if ctx.push_to_cloud and ctx.delete_after_upload:
        frame_names = {f.name for f in files}
        n_not_deleted = sum(
            1 for name in failures.identifiers(FailureKind.DELETE) if name in frame_names
        )
        summary.record("delete", n_published, n_published - n_not_deleted)

        dir_kept = str(ctx.output_dir) in failures.identifiers(FailureKind.DELETE)
        summary.record("delete_dir", 1, 0 if dir_kept else 1)


def extract_and_publish_frames(
    ctx: FramePublishingContext,
    on_progress: Optional[Callable[[float], None]] = None,
    show_progress: bool = True,
) -> RunSummary:
    """
    Extract frame bursts (or every frame) from a video, renumber them and publish them.

    Stages run strictly one after another: extraction, renumbering, resize/upload,
    deletion. Fatal conditions raise a FramePipelineError before the next stage
    starts; per-item failures are collected in the returned summary.

    Args:
        ctx: FramePublishingContext containing all necessary parameters and collaborators
        on_progress: Optional callback receiving the combined percentage
        show_progress: Whether to render a progress bar on the console
    Returns:
        RunSummary: Per-stage counters and every recoverable failure
    """
    logger.info(f"Starting frame extraction for: {ctx.video_path} ({ctx.mode.value} mode)")

    _prepare_output_dir(ctx)
    jobs = plan_jobs_for_context(ctx)

    summary = RunSummary()

    with ProgressTracker(
        push_to_cloud=ctx.push_to_cloud,
        delete_after_upload=ctx.delete_after_upload,
        on_change=on_progress,
        show_bar=show_progress,
    ) as progress:
        _extract(ctx, jobs, summary, progress)

        files = renumber_frames(ctx.output_dir, jobs)
        summary.record("list", len(files), len(files))
        progress.report(Stage.LIST, 1.0)

        _publish(ctx, files, summary, progress)

    summary.log_summary(logger)
    logger.info("Frame extraction completed")

    return summary
