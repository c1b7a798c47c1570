"""Foreign-audio subtitle heuristic.

A subtitle track that only captions foreign-language dialogue has far
fewer cues than a full track in the same file. Counting cues tells the
two apart without trusting the language or forced flags.
"""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, NamedTuple

from trackpick.exceptions import ExternalProcessError, MalformedOcrFrame
from trackpick.formatters.srt import format_srt
from trackpick.models import StreamDescriptor
from trackpick.ocr import parse_ocr_transcript

if TYPE_CHECKING:
    from trackpick.context import IngestionContext

logger = logging.getLogger(__name__)

# A line holding only the cue number, directly followed by the timing line
CUE_MARKER_RE = re.compile(
    r"^\d+[ \t]*\r?\n\d{2,}:\d{2}:\d{2},\d{3} --> \d{2,}:\d{2}:\d{2},\d{3}",
    re.MULTILINE,
)


class CueCount(NamedTuple):
    count: int
    stream: StreamDescriptor


def count_cues(transcript: str) -> int:
    """Count SRT cue headers in a transcript."""
    return len(CUE_MARKER_RE.findall(transcript))


def fetch_transcript(stream: StreamDescriptor, ctx: IngestionContext) -> str:
    """Get an SRT transcript for one subtitle stream.

    Text codecs are dumped directly; bitmap codecs go through OCR and are
    rendered to SRT first.
    """
    if ctx.config.is_image_codec(stream.codec_name):
        size = (stream.width, stream.height) if stream.width and stream.height else None
        frames = ctx.toolkit.extract_ocr_transcript(ctx.media_path, stream.index, size)
        return format_srt(parse_ocr_transcript(frames, ctx.config.ocr.text_prefix))
    return ctx.toolkit.extract_transcript(ctx.media_path, stream.index, "srt")


def count_candidates(
    candidates: list[StreamDescriptor], ctx: IngestionContext
) -> tuple[list[CueCount], list[int]]:
    """Count cues per candidate, extracting in fixed-size batches.

    Extractions run concurrently within a batch and batches run one after
    another, so at most ``batch_size`` ffmpeg processes run at once.

    Returns:
        Tuple of (counts in candidate order, indices whose extraction failed)
    """
    batch_size = ctx.config.foreign_audio.batch_size
    counts: list[CueCount] = []
    failed: list[int] = []

    for batch_number, start in enumerate(range(0, len(candidates), batch_size), start=1):
        batch = candidates[start : start + batch_size]
        logger.info("Getting subtitle batch %d (%d streams)", batch_number, len(batch))

        with ThreadPoolExecutor(max_workers=len(batch)) as executor:
            futures = [(stream, executor.submit(fetch_transcript, stream, ctx)) for stream in batch]
            for stream, future in futures:
                try:
                    transcript = future.result()
                except (ExternalProcessError, MalformedOcrFrame) as e:
                    logger.error("Skipping stream %d in foreign audio search: %s", stream.index, e)
                    failed.append(stream.index)
                    continue
                counts.append(CueCount(count_cues(transcript), stream))

    return counts, failed


def select_foreign_audio(
    candidates: list[StreamDescriptor], ctx: IngestionContext
) -> list[StreamDescriptor]:
    """Select subtitle tracks sparse enough to cover only foreign dialogue.

    A candidate is kept when ``0 < count < max_count * ratio`` (ratio 0.25
    by default), where ``max_count`` is the highest cue count in the pool.

    Candidates whose transcript could not be extracted are left out and
    their indices recorded in ``ctx.extraction_failures``.

    Returns:
        Matching candidates in catalog order
    """
    if not candidates:
        return []

    counts, failed = count_candidates(candidates, ctx)

    ranked = sorted(counts, key=lambda c: c.count, reverse=True)
    max_count = ranked[0].count if ranked else 0
    threshold = max_count * ctx.config.foreign_audio.ratio
    for entry in ranked:
        logger.info("Stream %d: %d cues", entry.stream.index, entry.count)

    chosen = {entry.stream.index for entry in ranked if 0 < entry.count < threshold}
    selected = [c for c in candidates if c.index in chosen]

    if failed:
        ctx.extraction_failures.extend(failed)
        logger.warning("Foreign audio search skipped streams %s", failed)

    logger.info(
        "Foreign audio search: max %d cues, threshold %.1f, selected %s",
        max_count,
        threshold,
        [s.index for s in selected],
    )
    return selected
