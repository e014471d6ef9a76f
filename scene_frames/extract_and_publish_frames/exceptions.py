class FramePipelineError(Exception):
    """Fatal condition that stops the run before the next stage starts."""


class InvalidRateError(FramePipelineError, ValueError):
    """Frame rate is zero or negative."""


class MissingTotalFramesError(FramePipelineError, ValueError):
    """All-frames mode was requested without a total frame count."""


class MalformedOutputNameError(FramePipelineError):
    """A file in the output directory does not follow the naming grammar."""


class FrameExtractionError(FramePipelineError):
    """Whole-video extraction failed; partial output is not usable."""
