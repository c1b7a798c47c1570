"""Tests for the ffprobe/ffmpeg toolkit."""

import json
import subprocess

import pytest

from trackpick.config import ToolsConfig
from trackpick.exceptions import (
    ExternalProcessError,
    ExtractionFailure,
    MalformedProbeData,
    OutputLimitExceeded,
    ToolNotFound,
)
from trackpick.extractors import FFmpegToolkit, RetryPolicy


class FakeRun:
    """Stand-in for subprocess.run replaying canned results."""

    def __init__(self, *results):
        self.results = list(results)
        self.commands = []

    def __call__(self, cmd, capture_output=False, timeout=None):
        self.commands.append(cmd)
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        return result


def completed(stdout=b"", stderr=b"", returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def fake_run(monkeypatch):
    def _install(*results):
        runner = FakeRun(*results)
        monkeypatch.setattr("trackpick.extractors.ffmpeg.subprocess.run", runner)
        return runner

    return _install


class TestFFmpegToolkit:
    """Test process handling."""

    def test_name(self):
        assert FFmpegToolkit.name == "ffmpeg"
        assert isinstance(FFmpegToolkit.is_available(), bool)

    def test_probe(self, fake_run):
        runner = fake_run(completed(json.dumps({"streams": []}).encode()))

        data = FFmpegToolkit().probe("/media/movie.mkv")

        assert data == {"streams": []}
        cmd = runner.commands[0]
        assert cmd[0] == "ffprobe"
        assert "-show_streams" in cmd
        assert cmd[-1] == "/media/movie.mkv"

    def test_probe_invalid_json(self, fake_run):
        fake_run(completed(b"not json"))
        with pytest.raises(MalformedProbeData):
            FFmpegToolkit().probe("/media/movie.mkv")

    def test_nonzero_exit(self, fake_run):
        fake_run(completed(stderr=b"Invalid data found", returncode=1))
        with pytest.raises(ExternalProcessError) as exc_info:
            FFmpegToolkit().probe("/media/movie.mkv")
        assert exc_info.value.returncode == 1
        assert "Invalid data" in exc_info.value.stderr

    def test_output_limit(self, fake_run):
        runner = fake_run(completed(b"x" * 600))
        toolkit = FFmpegToolkit(
            ToolsConfig(max_output_bytes=512), retry=RetryPolicy(attempts=3, delay_seconds=0)
        )
        with pytest.raises(OutputLimitExceeded):
            toolkit.probe("/media/movie.mkv")
        assert len(runner.commands) == 1

    def test_retry_transient_failure(self, fake_run):
        runner = fake_run(
            completed(returncode=1),
            completed(returncode=1),
            completed(b'{"streams": []}'),
        )
        toolkit = FFmpegToolkit(retry=RetryPolicy(attempts=3, delay_seconds=0))

        assert toolkit.probe("/media/movie.mkv") == {"streams": []}
        assert len(runner.commands) == 3

    def test_retry_gives_up(self, fake_run):
        runner = fake_run(completed(returncode=1))
        toolkit = FFmpegToolkit(retry=RetryPolicy(attempts=2, delay_seconds=0))
        with pytest.raises(ExternalProcessError):
            toolkit.probe("/media/movie.mkv")
        assert len(runner.commands) == 2

    def test_timeout(self, fake_run):
        fake_run(subprocess.TimeoutExpired(cmd="ffprobe", timeout=1))
        with pytest.raises(ExternalProcessError, match="timed out"):
            FFmpegToolkit().probe("/media/movie.mkv")

    def test_missing_binary_not_retried(self, fake_run):
        runner = fake_run(FileNotFoundError("ffprobe"))
        toolkit = FFmpegToolkit(retry=RetryPolicy(attempts=3, delay_seconds=0))
        with pytest.raises(ToolNotFound):
            toolkit.probe("/media/movie.mkv")
        assert len(runner.commands) == 1

    def test_extract_transcript(self, fake_run):
        runner = fake_run(completed(b"1\n00:00:01,000 --> 00:00:02,000\nHi\n"))

        text = FFmpegToolkit().extract_transcript("/media/movie.mkv", 5)

        assert text.startswith("1\n")
        cmd = runner.commands[0]
        assert cmd[cmd.index("-map") + 1] == "0:5"
        assert cmd[cmd.index("-f") + 1] == "srt"
        assert cmd[-1] == "pipe:1"

    def test_extract_transcript_failure(self, fake_run):
        fake_run(completed(returncode=1, stderr=b"Subtitle encoding failed"))
        with pytest.raises(ExtractionFailure) as exc_info:
            FFmpegToolkit().extract_transcript("/media/movie.mkv", 7)
        assert exc_info.value.stream_index == 7

    def test_ocr_filter_graph(self, fake_run):
        runner = fake_run(completed(b"frame:0 pts:0 pts_time:0\nlavfi.ocr.text=\n"))

        FFmpegToolkit(tools=ToolsConfig(ffmpeg="/opt/ffmpeg")).extract_ocr_transcript(
            "/media/movie.mkv", 7, (1280, 720)
        )

        cmd = runner.commands[0]
        assert cmd[0] == "/opt/ffmpeg"
        graph = cmd[cmd.index("-filter_complex") + 1]
        assert "s=1280x720" in graph
        assert "[0:7]overlay" in graph
        assert "ocr=language=eng" in graph
        assert "key=lavfi.ocr.text" in graph

    def test_ocr_graph_drops_repeated_frames_before_ocr(self, fake_run):
        runner = fake_run(completed(b""))

        FFmpegToolkit().extract_ocr_transcript("/media/movie.mkv", 7)

        graph = runner.commands[0][runner.commands[0].index("-filter_complex") + 1]
        assert graph.index("overlay") < graph.index("mpdecimate") < graph.index("ocr=")
