"""Core ingestion: probe, select streams, synthesize captions."""

import logging
import os
import threading
import warnings
from pathlib import Path

from trackpick.catalog import build_catalog
from trackpick.config import TrackpickConfig, get_config
from trackpick.context import IngestionContext
from trackpick.exceptions import ExternalProcessError, ExtractionFailure, MalformedOcrFrame
from trackpick.extractors import BaseToolkit, FFmpegToolkit
from trackpick.formatters.srt import write_srt
from trackpick.models import Selection, StreamDescriptor, StreamKind
from trackpick.ocr import parse_ocr_transcript
from trackpick.rules import select, select_subtitles

logger = logging.getLogger(__name__)

# One ingestion at a time, so only one run competes with the encoder
_admission = threading.Lock()


def select_streams(ctx: IngestionContext) -> Selection:
    """Probe the context's media file and pick the streams to keep.

    Raises:
        MalformedProbeData: If the probe output has no usable stream list
        InvalidRuleConfiguration: If a rule chain cannot be evaluated
        ExtractionFailure: If transcript extraction failures leave no subtitle
            selected although the file has subtitle streams
    """
    catalog = build_catalog(ctx.toolkit.probe(ctx.media_path))
    rules = ctx.config.selection

    video = select(catalog.video, rules.video, ctx=ctx, kind=StreamKind.VIDEO)
    logger.info("Video stream selected: %s", [s.index for s in video])

    audio = select(catalog.audio, rules.audio, ctx=ctx, kind=StreamKind.AUDIO)
    logger.info("Audio stream(s) selected: %s", [s.index for s in audio])

    subtitle = select_subtitles(catalog.subtitle, rules.subtitle, ctx=ctx)
    logger.info("Subtitle(s) selected: %s", [s.index for s in subtitle])

    failed = list(dict.fromkeys(ctx.extraction_failures))
    if failed and catalog.subtitle and not subtitle:
        raise ExtractionFailure(
            f"No subtitle selected, extraction failed for streams {failed}",
            stream_index=failed[0],
        )

    return Selection(
        media_path=ctx.media_path,
        video=video,
        audio=audio,
        subtitle=subtitle,
        extraction_failures=failed,
    )


def caption_path(ctx: IngestionContext, stream: StreamDescriptor, caption_dir: str | None = None) -> Path:
    """Where the synthesized caption for ``stream`` is written."""
    directory = caption_dir or ctx.config.output.caption_dir or os.path.dirname(ctx.media_path)
    return Path(directory) / f"{ctx.stem}.{stream.index}.srt"


def synthesize_captions(
    ctx: IngestionContext, selection: Selection, caption_dir: str | None = None
) -> Selection:
    """OCR every selected bitmap subtitle into an SRT file.

    Failures are local to the stream: it stays selected without a caption
    file and the reason is recorded in ``caption_failures``.

    Returns:
        A new Selection whose subtitle descriptors carry their caption files
    """
    subtitles: list[StreamDescriptor] = []
    failures = dict(selection.caption_failures)

    for stream in selection.subtitle:
        if not ctx.config.is_image_codec(stream.codec_name):
            subtitles.append(stream)
            continue

        logger.info("Converting image subtitle stream %d (%s)", stream.index, stream.codec_name)
        size = (stream.width, stream.height) if stream.width and stream.height else None
        try:
            frames = ctx.toolkit.extract_ocr_transcript(ctx.media_path, stream.index, size)
            cues = parse_ocr_transcript(frames, ctx.config.ocr.text_prefix)
        except (ExternalProcessError, MalformedOcrFrame) as e:
            logger.error("Caption synthesis failed for stream %d: %s", stream.index, e)
            failures[stream.index] = str(e)
            subtitles.append(stream)
            continue

        path = write_srt(cues, caption_path(ctx, stream, caption_dir))
        subtitles.append(stream.with_caption_file(str(path)))

    return selection.model_copy(update={"subtitle": subtitles, "caption_failures": failures})


def ingest_file(
    path: str,
    config: TrackpickConfig | None = None,
    toolkit: BaseToolkit | None = None,
    caption_dir: str | None = None,
) -> Selection:
    """Select streams for a media file and write captions for bitmap subtitles.

    This is the main entry point. It:
    1. Probes the file and builds the stream catalog
    2. Runs the video and audio rule chains
    3. Runs the subtitle rule-sets (with the foreign audio search if configured)
    4. OCRs selected bitmap subtitles into SRT files

    Only one ingestion runs at a time; concurrent callers wait.

    Args:
        path: Path to the media file
        config: Configuration (default: global config)
        toolkit: External tool collaborator (default: FFmpegToolkit)
        caption_dir: Directory for caption files (default: config, then the
            media file's directory)

    Returns:
        Selection of streams to keep

    Raises:
        FileNotFoundError: If the file does not exist
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"File not found: {path}")

    config = config or get_config()
    toolkit = toolkit or FFmpegToolkit(config.tools, config.ocr)
    ctx = IngestionContext(media_path=os.path.abspath(path), toolkit=toolkit, config=config)

    with _admission:
        logger.info("Ingesting %s", ctx.media_path)
        selection = select_streams(ctx)
        return synthesize_captions(ctx, selection, caption_dir)


def ingest_files(paths: list[str], config: TrackpickConfig | None = None, **kwargs) -> list[Selection]:
    """Ingest several files one after another, skipping failures."""
    results = []
    for path in paths:
        try:
            results.append(ingest_file(path, config=config, **kwargs))
        except Exception as e:
            warnings.warn(f"Failed to ingest {path}: {e}", stacklevel=2)
    return results
