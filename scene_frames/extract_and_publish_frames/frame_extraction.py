import logging
import subprocess
from typing import Callable, List, Optional, Sequence

from .exceptions import FrameExtractionError
from .task_running import TaskResult, run_all
from .timecode_conversion import frame_to_timecode
from .types import ExtractionJob, FramePublishingContext, JobResult

logger = logging.getLogger(__name__)


def run_job(job: ExtractionJob, ctx: FramePublishingContext) -> JobResult:
    """
    Extract the burst of one windowed job.

    A non-zero exit status or a failure to launch ffmpeg is reported in the result,
    never raised, so the rest of the batch keeps going.
    """
    seek_timecode = frame_to_timecode(job.start_frame, ctx.fps)
    output_pattern = ctx.output_dir / job.output_template

    logger.debug(
        f"Job {job.job_id}: {job.frame_count} frames around {job.center_frame} "
        f"from {seek_timecode}"
    )

    try:
        status = ctx.extractor.extract_window(
            ctx.video_path, seek_timecode, job.frame_count, output_pattern
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.error(f"Job {job.job_id} could not run extraction: {e}")
        return JobResult(job=job, succeeded=False, error=str(e))

    if status != 0:
        logger.warning(f"Job {job.job_id} (frame {job.center_frame}) exited with status {status}")
        return JobResult(job=job, succeeded=False, error=f"extractor exited with status {status}")

    return JobResult(job=job, succeeded=True)


def run_extraction(
    ctx: FramePublishingContext,
    jobs: Sequence[ExtractionJob],
    on_complete: Optional[Callable[[TaskResult, int, int], None]] = None,
) -> List[JobResult]:
    """Run every windowed job with the context's concurrency bound."""
    logger.info(f"Extracting {len(jobs)} bursts with concurrency {ctx.concurrency or 'unbounded'}")

    task_results = run_all(jobs, ctx.concurrency, lambda job: run_job(job, ctx), on_complete)

    job_results = []
    for result in task_results:
        if result.succeeded:
            job_results.append(result.value)
        else:
            # run_job reports its own failures, this only covers unexpected errors
            job_results.append(JobResult(job=result.task, succeeded=False, error=str(result.error)))

    n_failed = sum(1 for r in job_results if not r.succeeded)
    logger.info(f"Extraction finished: {len(job_results) - n_failed} succeeded, {n_failed} failed")

    return job_results


def extract_all_frames(ctx: FramePublishingContext, job: ExtractionJob) -> None:
    """Dump every frame of the video. Any failure is fatal for the run."""
    output_pattern = ctx.output_dir / job.output_template
    logger.info(f"Extracting all {job.frame_count} frames at {ctx.fps} fps")

    try:
        status = ctx.extractor.extract_all(ctx.video_path, ctx.fps, job.frame_count, output_pattern)
    except (OSError, subprocess.SubprocessError) as e:
        logger.error(f"Whole-video extraction could not run: {e}")
        raise FrameExtractionError(f"Whole-video extraction could not run: {e}") from e

    if status != 0:
        logger.error(f"Whole-video extraction exited with status {status}")
        raise FrameExtractionError(f"Whole-video extraction exited with status {status}")

    logger.info("Whole-video extraction completed")
