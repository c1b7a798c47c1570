"""Pytest configuration and fixtures."""

import shutil
import threading
import time
from typing import Any

import pytest

from trackpick.config import TrackpickConfig, reset_config
from trackpick.context import IngestionContext
from trackpick.exceptions import ExtractionFailure
from trackpick.extractors.base import BaseToolkit
from trackpick.models import StreamDescriptor, StreamKind


class FakeToolkit(BaseToolkit):
    """In-memory toolkit returning canned probe data and transcripts."""

    name = "fake"

    def __init__(
        self,
        probe_data: dict[str, Any] | None = None,
        transcripts: dict[int, str] | None = None,
        ocr_transcripts: dict[int, str] | None = None,
        failing: set[int] | None = None,
        delay: float = 0.0,
    ):
        self.probe_data = probe_data or {"streams": []}
        self.transcripts = transcripts or {}
        self.ocr_transcripts = ocr_transcripts or {}
        self.failing = failing or set()
        self.delay = delay
        self.calls: list[tuple[str, int]] = []
        self.max_active = 0
        self._active = 0
        self._lock = threading.Lock()

    @classmethod
    def is_available(cls) -> bool:
        return True

    def probe(self, path: str) -> dict[str, Any]:
        return self.probe_data

    def _enter(self, kind: str, stream_index: int) -> None:
        with self._lock:
            self.calls.append((kind, stream_index))
            self._active += 1
            self.max_active = max(self.max_active, self._active)

    def _leave(self) -> None:
        with self._lock:
            self._active -= 1

    def extract_transcript(self, path: str, stream_index: int, format_hint: str = "srt") -> str:
        self._enter("text", stream_index)
        try:
            if self.delay:
                time.sleep(self.delay)
            if stream_index in self.failing:
                raise ExtractionFailure(f"stream {stream_index} broken", stream_index=stream_index)
            return self.transcripts.get(stream_index, "")
        finally:
            self._leave()

    def extract_ocr_transcript(self, path, stream_index, size=None) -> str:
        self._enter("ocr", stream_index)
        try:
            if stream_index in self.failing:
                raise ExtractionFailure(f"stream {stream_index} broken", stream_index=stream_index)
            return self.ocr_transcripts.get(stream_index, "")
        finally:
            self._leave()


def make_srt(count: int) -> str:
    """Build an SRT document with ``count`` cues."""
    blocks = []
    for i in range(1, count + 1):
        start = i * 2
        blocks.append(
            f"{i}\n00:00:{start % 60:02d},000 --> 00:00:{start % 60:02d},900\nLine {i}\n"
        )
    return "\n".join(blocks)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Keep user config files and TRACKPICK_* variables out of tests."""
    monkeypatch.setattr("trackpick.config.CONFIG_LOCATIONS", [])
    for key in (
        "BATCH_SIZE",
        "FFPROBE",
        "FFMPEG",
        "TOOL_TIMEOUT",
        "MAX_OUTPUT_BYTES",
        "RETRY_ATTEMPTS",
        "OUTPUT_PATH",
        "CAPTION_DIR",
    ):
        monkeypatch.delenv(f"TRACKPICK_{key}", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def stream():
    """Factory for StreamDescriptor objects."""

    def _make(index: int, kind: str = "video", **kwargs: Any) -> StreamDescriptor:
        return StreamDescriptor(index=index, kind=StreamKind(kind), **kwargs)

    return _make


@pytest.fixture
def srt_text():
    return make_srt


@pytest.fixture
def config() -> TrackpickConfig:
    return TrackpickConfig()


@pytest.fixture
def fake_toolkit():
    return FakeToolkit


@pytest.fixture
def make_context(config):
    """Build an IngestionContext around a FakeToolkit."""

    def _make(toolkit: BaseToolkit | None = None, cfg: TrackpickConfig | None = None):
        return IngestionContext(
            media_path="/media/incoming/movie.mkv",
            toolkit=toolkit or FakeToolkit(),
            config=cfg or config,
        )

    return _make


@pytest.fixture
def probe_data() -> dict[str, Any]:
    """ffprobe output for a typical Blu-ray remux."""
    return {
        "streams": [
            {
                "index": 0,
                "codec_name": "h264",
                "codec_type": "video",
                "width": 1920,
                "height": 1080,
                "tags": {"language": "eng", "NUMBER_OF_FRAMES-eng": "172800"},
            },
            {
                "index": 1,
                "codec_name": "mjpeg",
                "codec_type": "video",
                "width": 640,
                "height": 360,
                "duration": "0.040000",
                "tags": {"filename": "cover.jpg"},
            },
            {"index": 2, "codec_name": "truehd", "codec_type": "audio", "tags": {"language": "eng"}},
            {"index": 3, "codec_name": "ac3", "codec_type": "audio", "tags": {"language": "eng"}},
            {"index": 4, "codec_name": "ac3", "codec_type": "audio", "tags": {"language": "fre"}},
            {
                "index": 5,
                "codec_name": "subrip",
                "codec_type": "subtitle",
                "tags": {"language": "eng", "title": "Forced"},
            },
            {"index": 6, "codec_name": "subrip", "codec_type": "subtitle", "tags": {"language": "eng"}},
            {
                "index": 7,
                "codec_name": "hdmv_pgs_subtitle",
                "codec_type": "subtitle",
                "width": 1920,
                "height": 1080,
                "tags": {"language": "eng", "title": "SDH"},
            },
            {"index": 8, "codec_name": "subrip", "codec_type": "subtitle", "tags": {"language": "ger"}},
            {"index": 9, "codec_name": "ttf", "codec_type": "attachment", "tags": {"filename": "a.ttf"}},
        ],
        "format": {"filename": "movie.mkv", "format_name": "matroska,webm", "nb_streams": 10},
    }


@pytest.fixture
def has_ffprobe() -> bool:
    """Check if ffprobe is available."""
    return shutil.which("ffprobe") is not None
