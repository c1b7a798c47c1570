"""FFprobe/FFmpeg toolkit."""

import json
import logging
import shutil
import subprocess
from typing import Any, ClassVar

from trackpick.config import OCRConfig, ToolsConfig
from trackpick.exceptions import (
    ExternalProcessError,
    ExtractionFailure,
    MalformedProbeData,
    OutputLimitExceeded,
    ToolNotFound,
)
from trackpick.extractors.base import BaseToolkit, RetryPolicy

logger = logging.getLogger(__name__)

# Canvas used to render bitmap subtitles when the stream has no size
DEFAULT_CANVAS = (1920, 1080)


class FFmpegToolkit(BaseToolkit):
    """Probe and extract streams with the ffprobe and ffmpeg binaries.

    Each invocation captures stdout and stderr in full and fails once the
    combined output exceeds ``tools.max_output_bytes``. Transient failures
    (non-zero exit, timeout) are retried according to ``retry``.
    """

    name: ClassVar[str] = "ffmpeg"

    def __init__(
        self,
        tools: ToolsConfig | None = None,
        ocr: OCRConfig | None = None,
        retry: RetryPolicy | None = None,
    ):
        self.tools = tools or ToolsConfig()
        self.ocr = ocr or OCRConfig()
        self.retry = retry or RetryPolicy(
            attempts=self.tools.retry_attempts,
            delay_seconds=self.tools.retry_delay_seconds,
        )

    @classmethod
    def is_available(cls) -> bool:
        """Check if ffprobe and ffmpeg are available."""
        return shutil.which("ffprobe") is not None and shutil.which("ffmpeg") is not None

    def probe(self, path: str) -> dict[str, Any]:
        """Run ffprobe and return its JSON output."""
        cmd = [
            self.tools.ffprobe,
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            path,
        ]
        stdout = self._run(cmd)
        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise MalformedProbeData(f"ffprobe returned invalid JSON for {path}: {e}") from e
        if not isinstance(data, dict):
            raise MalformedProbeData(f"ffprobe returned {type(data).__name__} for {path}")
        return data

    def extract_transcript(self, path: str, stream_index: int, format_hint: str = "srt") -> str:
        """Dump one subtitle stream to stdout in ``format_hint`` format."""
        cmd = [
            self.tools.ffmpeg,
            "-v",
            "error",
            "-nostdin",
            "-i",
            path,
            "-map",
            f"0:{stream_index}",
            "-f",
            format_hint,
            "pipe:1",
        ]
        try:
            return self._run(cmd)
        except ExternalProcessError as e:
            raise ExtractionFailure(
                f"Cannot extract stream {stream_index}: {e}",
                stream_index=stream_index,
                command=e.command,
                returncode=e.returncode,
                stderr=e.stderr,
            ) from e

    def extract_ocr_transcript(
        self, path: str, stream_index: int, size: tuple[int, int] | None = None
    ) -> str:
        """Overlay a bitmap subtitle stream on a blank canvas and OCR each frame.

        ``mpdecimate`` drops frames identical to the previous one, so only
        frames where the subtitle changes reach ``ocr``. The ``metadata``
        filter prints one ``frame:N pts:P pts_time:T`` line per remaining
        frame followed by the recognized text.
        """
        width, height = size or DEFAULT_CANVAS
        graph = (
            f"color=c=black:s={width}x{height}[bg];"
            f"[bg][0:{stream_index}]overlay=shortest=1,"
            "mpdecimate,"
            f"ocr=language={self.ocr.language},"
            "metadata=mode=print:key=lavfi.ocr.text:file='pipe\\:1'"
        )
        cmd = [
            self.tools.ffmpeg,
            "-v",
            "error",
            "-nostdin",
            "-i",
            path,
            "-filter_complex",
            graph,
            "-f",
            "null",
            "-",
        ]
        try:
            return self._run(cmd)
        except ExternalProcessError as e:
            raise ExtractionFailure(
                f"OCR of stream {stream_index} failed: {e}",
                stream_index=stream_index,
                command=e.command,
                returncode=e.returncode,
                stderr=e.stderr,
            ) from e

    def _run(self, cmd: list[str]) -> str:
        """Run a command under the retry policy and return its stdout."""
        for attempt in self.retry.retrying(logger):
            with attempt:
                return self._run_once(cmd)
        raise AssertionError("unreachable")  # pragma: no cover

    def _run_once(self, cmd: list[str]) -> str:
        logger.debug("Running: %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, timeout=self.tools.timeout_seconds)
        except FileNotFoundError as e:
            raise ToolNotFound(f"{cmd[0]} not found", command=cmd) from e
        except subprocess.TimeoutExpired as e:
            raise ExternalProcessError(
                f"{cmd[0]} timed out after {self.tools.timeout_seconds}s", command=cmd
            ) from e

        output_size = len(result.stdout or b"") + len(result.stderr or b"")
        if output_size > self.tools.max_output_bytes:
            raise OutputLimitExceeded(
                f"{cmd[0]} produced {output_size} bytes (limit {self.tools.max_output_bytes})",
                command=cmd,
                returncode=result.returncode,
            )

        stderr = result.stderr.decode("utf-8", errors="replace")
        if result.returncode != 0:
            raise ExternalProcessError(
                f"{cmd[0]} exited with status {result.returncode}",
                command=cmd,
                returncode=result.returncode,
                stderr=stderr,
            )
        if stderr:
            logger.debug("%s stderr: %s", cmd[0], stderr.strip())
        return result.stdout.decode("utf-8", errors="replace")
