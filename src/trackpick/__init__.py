"""trackpick - stream selection for media ingestion.

Decides which video, audio and subtitle streams of a container to keep,
and OCRs selected bitmap subtitles into SRT captions.

Usage:
    from trackpick import ingest_file, build_encode_command

    selection = ingest_file("movie.mkv")
    print([s.index for s in selection.subtitle])

    # Caption files generated for PGS/VobSub tracks
    print(selection.caption_files)

    # ffmpeg arguments for the selection
    print(build_encode_command(selection))
"""

from trackpick._version import __version__
from trackpick.catalog import build_catalog
from trackpick.command import build_encode_command
from trackpick.config import TrackpickConfig, get_config, load_config
from trackpick.context import IngestionContext
from trackpick.exceptions import (
    ExternalProcessError,
    ExtractionFailure,
    InvalidRuleConfiguration,
    MalformedOcrFrame,
    MalformedProbeData,
    OutputLimitExceeded,
    TrackpickError,
)
from trackpick.extractors import BaseToolkit, FFmpegToolkit, RetryPolicy
from trackpick.formatters import format_default, format_json, format_srt, to_dict
from trackpick.ingest import ingest_file, ingest_files, select_streams
from trackpick.models import (
    CaptionCue,
    Catalog,
    Selection,
    StreamDescriptor,
    StreamKind,
)
from trackpick.ocr import parse_ocr_transcript
from trackpick.rules import select, select_foreign_audio, select_subtitles

__all__ = [
    # Version
    "__version__",
    # Main functions
    "ingest_file",
    "ingest_files",
    "select_streams",
    "build_catalog",
    "select",
    "select_subtitles",
    "select_foreign_audio",
    "parse_ocr_transcript",
    "build_encode_command",
    # Models
    "StreamKind",
    "StreamDescriptor",
    "Catalog",
    "CaptionCue",
    "Selection",
    "IngestionContext",
    # Config
    "TrackpickConfig",
    "load_config",
    "get_config",
    # Toolkits
    "BaseToolkit",
    "FFmpegToolkit",
    "RetryPolicy",
    # Formatters
    "format_default",
    "format_json",
    "format_srt",
    "to_dict",
    # Errors
    "TrackpickError",
    "MalformedProbeData",
    "InvalidRuleConfiguration",
    "ExternalProcessError",
    "OutputLimitExceeded",
    "ExtractionFailure",
    "MalformedOcrFrame",
]
