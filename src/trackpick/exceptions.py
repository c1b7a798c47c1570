"""Exceptions raised by trackpick."""

from __future__ import annotations

from typing import Any


class TrackpickError(Exception):
    """Base class for all trackpick errors."""

    pass


class MalformedProbeData(TrackpickError):
    """Probe output cannot be turned into a stream catalog."""

    pass


class InvalidRuleConfiguration(TrackpickError):
    """A selection rule is unknown or carries an unsupported value."""

    def __init__(self, message: str, value: Any = None):
        super().__init__(f"{message}: {value!r}" if value is not None else message)
        self.value = value


class ExternalProcessError(TrackpickError):
    """An ffprobe/ffmpeg invocation failed."""

    retriable: bool = True

    def __init__(self, message: str, command: list[str] | None = None,
                 returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        # Keep only the tail, ffmpeg stderr can be huge
        self.stderr = stderr[-2000:]


class OutputLimitExceeded(ExternalProcessError):
    """Captured process output grew past the configured bound."""

    retriable = False


class ToolNotFound(ExternalProcessError):
    """The ffprobe/ffmpeg binary is not installed."""

    retriable = False


class ExtractionFailure(ExternalProcessError):
    """Subtitle transcript extraction failed for one stream."""

    def __init__(self, message: str, stream_index: int | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.stream_index = stream_index


class MalformedOcrFrame(TrackpickError):
    """An OCR frame marker is not followed by its text line."""

    def __init__(self, message: str, line_number: int, line: str = ""):
        super().__init__(f"{message} (line {line_number}: {line!r})")
        self.line_number = line_number
        self.line = line
