"""Default output formatter - selected streams per kind."""

import os

from trackpick.models import Selection, StreamDescriptor, StreamKind


def _describe(stream: StreamDescriptor) -> str:
    parts = [f"#{stream.index:<3}", f"{stream.codec_name or 'unknown':<18}"]
    if stream.width and stream.height:
        parts.append(f"{stream.width}x{stream.height}")
    if stream.language:
        parts.append(f"[{stream.language}]")
    if stream.title:
        parts.append(f'"{stream.title}"')
    return " ".join(parts)


def format_default(selection: Selection) -> str:
    """Format a selection as a short per-kind listing.

    Subtitle lines show the generated caption file, or the reason caption
    synthesis failed.
    """
    lines = []

    lines.append("=" * 70)
    lines.append(f"File: {os.path.basename(selection.media_path)}")
    lines.append("=" * 70)

    for kind in StreamKind:
        streams = selection.for_kind(kind)
        lines.append("")
        lines.append(f"## {kind.value.upper()} ({len(streams)})")
        if not streams:
            lines.append("  (none)")
        for stream in streams:
            lines.append(f"  {_describe(stream)}")
            if stream.caption_file:
                lines.append(f"       -> {stream.caption_file}")
            elif stream.index in selection.caption_failures:
                lines.append(f"       !! OCR failed: {selection.caption_failures[stream.index]}")

    if selection.extraction_failures:
        lines.append("")
        lines.append(f"!! Foreign audio search skipped streams {selection.extraction_failures}")

    return "\n".join(lines)


def format_quiet(selection: Selection) -> str:
    """One-line summary: filename | v:... | a:... | s:..."""
    parts = [os.path.basename(selection.media_path)]
    for kind in StreamKind:
        indices = ",".join(str(s.index) for s in selection.for_kind(kind)) or "-"
        parts.append(f"{kind.value[0]}:{indices}")
    return " | ".join(parts)
