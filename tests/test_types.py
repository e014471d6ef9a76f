"""Tests for context validation and run summaries."""

import pytest

from scene_frames.extract_and_publish_frames import (
    ExtractionMode,
    FailureKind,
    FailureSet,
    InvalidRateError,
    MissingTotalFramesError,
    RunSummary,
    SceneDescriptor,
)


class TestFramePublishingContext:
    def test_defaults(self, make_context, video_path):
        ctx = make_context()

        assert ctx.mode is ExtractionMode.WINDOWED
        assert ctx.video_id == video_path.stem
        assert ctx.upload_prefix == "video.episode_01"
        assert ctx.image_extension == "jpg"

    def test_normalizes_loose_values(self, make_context, tmp_path):
        ctx = make_context(mode="all-frames", total_frames=10, image_extension=".png", output_dir=str(tmp_path))

        assert ctx.mode is ExtractionMode.ALL_FRAMES
        assert ctx.image_extension == "png"
        assert ctx.output_dir == tmp_path

    @pytest.mark.parametrize("fps", [0, -23.976])
    def test_invalid_rate(self, make_context, fps):
        with pytest.raises(InvalidRateError):
            make_context(fps=fps)

    def test_all_frames_requires_total(self, make_context):
        with pytest.raises(MissingTotalFramesError):
            make_context(mode=ExtractionMode.ALL_FRAMES)

    def test_scenes_and_frames_are_exclusive(self, make_context):
        with pytest.raises(ValueError):
            make_context(scenes=[SceneDescriptor("s0", 1, 2)], frames=[5])

    def test_upload_requires_storage(self, make_context):
        with pytest.raises(ValueError):
            make_context(push_to_cloud=True)

    @pytest.mark.parametrize(
        "overrides", [{"window_radius": -1}, {"concurrency": -2}, {"target_width": 0}]
    )
    def test_negative_settings(self, make_context, overrides):
        with pytest.raises(ValueError):
            make_context(**overrides)


class TestRunSummary:
    def test_counts(self):
        summary = RunSummary()
        summary.record("process", 10, 8)
        summary.published_frames = 8
        summary.failures.add("frame.1.jpg", FailureKind.UPLOAD, "timeout")
        summary.failures.add("frame.2.jpg", FailureKind.RESIZE, "unreadable")

        assert summary.stages["process"].failed == 2
        assert summary.succeeded_count == 8
        assert summary.failed_count == 2

    def test_failure_set_filters_by_kind(self):
        failures = FailureSet()
        failures.add("a", FailureKind.UPLOAD, "x")
        failures.add("b", FailureKind.DELETE, "y")

        assert failures.identifiers(FailureKind.DELETE) == ["b"]
        assert [f.identifier for f in failures] == ["a", "b"]
