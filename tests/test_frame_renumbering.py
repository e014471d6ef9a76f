"""Tests for renumbering burst output into absolute frame numbers."""

from pathlib import Path

import pytest

from scene_frames.extract_and_publish_frames import (
    ExtractionMode,
    MalformedOutputNameError,
    SceneDescriptor,
    extract_all_frames,
    plan_jobs,
    renumber_frames,
    run_job,
)
from conftest import write_image


def _extract(ctx, jobs):
    for job in jobs:
        assert run_job(job, ctx).succeeded


def _names(directory: Path):
    return sorted(p.name for p in directory.iterdir())


class TestRenumberFrames:
    def test_scene_bursts(self, make_context, output_dir: Path):
        ctx = make_context(window_radius=2)
        jobs = plan_jobs([SceneDescriptor("s0", 100, 500)], window_radius=2)
        _extract(ctx, jobs)

        files = renumber_frames(output_dir, jobs)

        assert [f.absolute_frame for f in files] == [98, 99, 100, 101, 102, 498, 499, 500, 501, 502]
        assert _names(output_dir) == [
            f"frame.{n:03d}.jpg" for n in (98, 99, 100, 101, 102, 498, 499, 500, 501, 502)
        ]
        assert all(f.path.exists() for f in files)

    @pytest.mark.parametrize("radius", [0, 1, 2, 5])
    def test_burst_center_recovers_requested_frame(self, make_context, output_dir: Path, radius):
        ctx = make_context(window_radius=radius)
        jobs = plan_jobs([40, 250], window_radius=radius)
        _extract(ctx, jobs)

        files = renumber_frames(output_dir, jobs)

        centers = [f for f in files if f.sequence_offset == radius + 1]
        assert sorted(f.absolute_frame for f in centers) == [40, 250]
        assert all(f.absolute_frame == f.center_frame for f in centers)

    def test_padding_follows_largest_frame(self, make_context, output_dir: Path):
        ctx = make_context(window_radius=1)
        jobs = plan_jobs([5, 1200], window_radius=1)
        _extract(ctx, jobs)

        renumber_frames(output_dir, jobs)

        assert _names(output_dir) == [
            "frame.0004.jpg",
            "frame.0005.jpg",
            "frame.0006.jpg",
            "frame.1199.jpg",
            "frame.1200.jpg",
            "frame.1201.jpg",
        ]

    def test_window_clamped_at_start_of_video(self, make_context, output_dir: Path):
        ctx = make_context(window_radius=2)
        jobs = plan_jobs([1], window_radius=2)
        _extract(ctx, jobs)

        files = renumber_frames(output_dir, jobs)

        assert [f.absolute_frame for f in files] == [0, 1, 2, 3, 4]

    def test_overlapping_windows_keep_one_copy(self, make_context, output_dir: Path):
        ctx = make_context(window_radius=2)
        jobs = plan_jobs([10, 12], window_radius=2)
        _extract(ctx, jobs)

        files = renumber_frames(output_dir, jobs)

        assert [f.absolute_frame for f in files] == list(range(8, 15))
        assert len(list(output_dir.iterdir())) == 7

    def test_idempotent(self, make_context, output_dir: Path, monkeypatch):
        ctx = make_context(window_radius=2)
        jobs = plan_jobs([SceneDescriptor("s0", 100, 500)], window_radius=2)
        _extract(ctx, jobs)
        first = renumber_frames(output_dir, jobs)

        renames = []
        original_rename = Path.rename
        monkeypatch.setattr(
            Path, "rename", lambda self, target: renames.append(target) or original_rename(self, target)
        )
        second = renumber_frames(output_dir, jobs)

        assert renames == []
        assert [f.path for f in second] == [f.path for f in first]

    def test_whole_video_output_is_listed_as_is(self, output_dir: Path):
        jobs = plan_jobs([], 0, mode="all-frames", total_frames=5)
        for i in range(5):
            write_image(output_dir / f"frame.{i}.jpg")

        files = renumber_frames(output_dir, jobs)

        assert [f.absolute_frame for f in files] == [0, 1, 2, 3, 4]
        assert _names(output_dir) == [f"frame.{i}.jpg" for i in range(5)]

    def test_whole_video_output_needs_no_renaming(self, make_context, output_dir: Path, monkeypatch):
        ctx = make_context(mode=ExtractionMode.ALL_FRAMES, total_frames=10)
        jobs = plan_jobs([], 0, mode=ctx.mode, total_frames=10)
        extract_all_frames(ctx, jobs[0])

        renames = []
        original_rename = Path.rename
        monkeypatch.setattr(
            Path, "rename", lambda self, target: renames.append(target) or original_rename(self, target)
        )
        files = renumber_frames(output_dir, jobs)

        assert renames == []
        assert [f.absolute_frame for f in files] == list(range(10))
        assert _names(output_dir) == [f"frame.{i}.jpg" for i in range(10)]

    def test_subdirectories_are_ignored(self, output_dir: Path):
        (output_dir / "thumbs").mkdir()
        write_image(output_dir / "frame.7.jpg")

        files = renumber_frames(output_dir, [])

        assert [f.absolute_frame for f in files] == [7]

    def test_empty_directory(self, output_dir: Path):
        assert renumber_frames(output_dir, []) == []


class TestMalformedOutput:
    def test_unknown_file(self, output_dir: Path):
        (output_dir / "notes.txt").write_text("not a frame")

        with pytest.raises(MalformedOutputNameError):
            renumber_frames(output_dir, [])

    def test_burst_from_unplanned_job(self, output_dir: Path):
        jobs = plan_jobs([100], window_radius=2)
        write_image(output_dir / "burst-9-keyframe-100-frame-1.jpg")

        with pytest.raises(MalformedOutputNameError):
            renumber_frames(output_dir, jobs)

    def test_burst_center_mismatch(self, output_dir: Path):
        jobs = plan_jobs([100], window_radius=2)
        write_image(output_dir / "burst-0-keyframe-101-frame-1.jpg")

        with pytest.raises(MalformedOutputNameError):
            renumber_frames(output_dir, jobs)

    def test_sequence_offset_out_of_range(self, output_dir: Path):
        jobs = plan_jobs([100], window_radius=2)
        write_image(output_dir / "burst-0-keyframe-100-frame-6.jpg")

        with pytest.raises(MalformedOutputNameError):
            renumber_frames(output_dir, jobs)

    def test_nothing_renamed_on_failure(self, make_context, output_dir: Path):
        ctx = make_context(window_radius=1)
        jobs = plan_jobs([50], window_radius=1)
        _extract(ctx, jobs)
        (output_dir / "stray.bin").write_bytes(b"\x00")
        before = _names(output_dir)

        with pytest.raises(MalformedOutputNameError):
            renumber_frames(output_dir, jobs)

        assert _names(output_dir) == before
