"""Build per-kind candidate sets from ffprobe output."""

import contextlib
import logging
import math
from collections.abc import Mapping
from typing import Any

from trackpick.exceptions import MalformedProbeData
from trackpick.models import Catalog, StreamDescriptor, StreamKind

logger = logging.getLogger(__name__)

# mkvmerge writes statistics tags, sometimes with a language suffix
FRAME_COUNT_TAGS = ("NUMBER_OF_FRAMES", "NUMBER_OF_FRAMES-eng")


def build_catalog(probe_result: Any) -> Catalog:
    """Partition probe streams into video, audio and subtitle candidates.

    The partition is stable: each candidate set keeps the probe's stream
    order. Streams of other kinds (data, attachments) are ignored.

    Args:
        probe_result: Parsed ``ffprobe -show_streams -print_format json`` output

    Returns:
        Catalog with one candidate set per kind

    Raises:
        MalformedProbeData: If the stream list is missing or a record is unusable
    """
    if not isinstance(probe_result, Mapping):
        raise MalformedProbeData(f"probe result is not an object: {type(probe_result).__name__}")

    streams = probe_result.get("streams")
    if not isinstance(streams, list):
        raise MalformedProbeData("probe result has no stream list")

    catalog = Catalog(format=dict(probe_result.get("format") or {}))
    seen: set[int] = set()

    for position, stream in enumerate(streams):
        if not isinstance(stream, Mapping):
            raise MalformedProbeData(f"stream record {position} is not an object")

        try:
            kind = StreamKind(stream.get("codec_type"))
        except ValueError:
            logger.debug("Ignoring stream %s of type %r", stream.get("index"), stream.get("codec_type"))
            continue

        descriptor = parse_stream(stream, kind)
        if descriptor.index in seen:
            raise MalformedProbeData(f"duplicate stream index {descriptor.index}")
        seen.add(descriptor.index)
        getattr(catalog, kind.value).append(descriptor)

    logger.debug(
        "Catalog: %d video, %d audio, %d subtitle",
        len(catalog.video),
        len(catalog.audio),
        len(catalog.subtitle),
    )
    return catalog


def parse_stream(stream: Mapping[str, Any], kind: StreamKind) -> StreamDescriptor:
    """Convert one ffprobe stream record into a StreamDescriptor."""
    index = stream.get("index")
    if isinstance(index, bool) or not isinstance(index, int):
        raise MalformedProbeData(f"stream record has no integer index: {index!r}")

    tags = dict(stream.get("tags") or {})

    width = height = frame_count = None
    duration = None
    with contextlib.suppress(ValueError, TypeError):
        width = int(stream.get("width"))
    with contextlib.suppress(ValueError, TypeError):
        height = int(stream.get("height"))
    with contextlib.suppress(ValueError, TypeError):
        duration = float(stream.get("duration"))
    for tag in FRAME_COUNT_TAGS:
        if tag in tags:
            with contextlib.suppress(ValueError, TypeError):
                frame_count = int(tags[tag])
                break

    # Drop nan/inf so they never win a min/max comparison
    if duration is not None and not math.isfinite(duration):
        duration = None

    return StreamDescriptor(
        index=index,
        kind=kind,
        codec_name=stream.get("codec_name"),
        width=width,
        height=height,
        duration=duration,
        frame_count=frame_count,
        language=tags.get("language"),
        title=tags.get("title"),
        tags=tags,
    )
