import logging
from pathlib import Path
from typing import Dict, List, Sequence

from .exceptions import MalformedOutputNameError
from .frame_naming import canonical_name, parse_burst_name, parse_canonical_name
from .types import ExtractionJob, OutputFile

logger = logging.getLogger(__name__)


def _parse_output_file(path: Path, jobs_by_id: Dict[int, ExtractionJob]) -> OutputFile:
    """Recover the absolute frame of a file from its name and the job that produced it."""
    burst = parse_burst_name(path.name)

    if burst is not None:
        job = jobs_by_id.get(burst.job_id)

        if job is None or job.center_frame != burst.center_frame:
            raise MalformedOutputNameError(f"'{path.name}' does not belong to any planned job")

        if not 1 <= burst.sequence_offset <= job.frame_count:
            raise MalformedOutputNameError(
                f"'{path.name}' has sequence offset {burst.sequence_offset} outside 1..{job.frame_count}"
            )

        # Offsets are 1-based: offset (radius + 1) is the center of an unclamped window
        absolute = job.start_frame + burst.sequence_offset - 1

        return OutputFile(
            path=path,
            absolute_frame=absolute,
            center_frame=burst.center_frame,
            sequence_offset=burst.sequence_offset,
        )

    canonical = parse_canonical_name(path.name)
    if canonical is not None:
        return OutputFile(path=path, absolute_frame=canonical.absolute_frame)

    raise MalformedOutputNameError(f"'{path.name}' does not match the output naming scheme")


def renumber_frames(output_dir: Path, jobs: Sequence[ExtractionJob]) -> List[OutputFile]:
    """
    Rename extracted files to frame.<absolute_frame>.<ext>.

    Burst files are resolved against the jobs that produced them, already canonical
    files are kept, so running twice renames nothing. Numbers are zero-padded to the
    widest absolute frame in the directory. When overlapping windows produce the same
    absolute frame more than once, a single copy is kept.

    Args:
        output_dir: Directory holding the extracted frames
        jobs: Jobs of the extraction batch
    Returns:
        List[OutputFile]: Renamed files sorted by absolute frame
    """
    logger.info(f"Renumbering extracted frames in: {output_dir}")

    jobs_by_id = {job.job_id: job for job in jobs if not job.is_whole_video}

    try:
        parsed = [
            _parse_output_file(path, jobs_by_id)
            for path in sorted(output_dir.iterdir())
            if path.is_file()
        ]
    except MalformedOutputNameError as e:
        logger.error(f"Cannot renumber output: {e}")
        raise

    if not parsed:
        logger.warning("No extracted frames found to renumber")
        return []

    width = len(str(max(f.absolute_frame for f in parsed)))

    # Group by target name, preferring a file that already carries it
    groups: Dict[str, List[OutputFile]] = {}
    for output_file in parsed:
        target = canonical_name(output_file.absolute_frame, width, output_file.path.suffix[1:])
        groups.setdefault(target, []).append(output_file)

    renumbered = []
    n_renamed = 0
    n_duplicates = 0

    for target, candidates in groups.items():
        keeper = next((f for f in candidates if f.name == target), candidates[0])

        for duplicate in candidates:
            if duplicate is not keeper:
                logger.debug(f"Removing duplicate of frame {keeper.absolute_frame}: {duplicate.name}")
                duplicate.path.unlink()
                n_duplicates += 1

        target_path = output_dir / target
        if keeper.path != target_path:
            keeper.path.rename(target_path)
            n_renamed += 1

        renumbered.append(
            OutputFile(
                path=target_path,
                absolute_frame=keeper.absolute_frame,
                center_frame=keeper.center_frame,
                sequence_offset=keeper.sequence_offset,
            )
        )

    renumbered.sort(key=lambda f: f.absolute_frame)
    logger.info(
        f"Renumbered {n_renamed} files, kept {len(renumbered) - n_renamed} canonical, "
        f"removed {n_duplicates} duplicates"
    )

    return renumbered
