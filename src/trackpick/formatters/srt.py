"""SubRip caption formatter."""

import logging
import re
from pathlib import Path

from trackpick.models import CaptionCue

logger = logging.getLogger(__name__)

TIMESTAMP_RE = re.compile(r"^(\d{2,}):([0-5]\d):([0-5]\d),(\d{3})$")


def format_timestamp(ms: int) -> str:
    """Format milliseconds as an SRT timestamp (HH:MM:SS,mmm).

    Negative values clamp to zero.
    """
    ms = max(0, int(ms))
    hours, rest = divmod(ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d},{millis:03d}"


def parse_timestamp(value: str) -> int:
    """Parse an SRT timestamp back into milliseconds.

    Raises:
        ValueError: If ``value`` is not HH:MM:SS,mmm
    """
    match = TIMESTAMP_RE.match(value.strip())
    if not match:
        raise ValueError(f"Not an SRT timestamp: {value!r}")
    hours, minutes, seconds, millis = (int(g) for g in match.groups())
    return ((hours * 60 + minutes) * 60 + seconds) * 1000 + millis


def format_cue(cue: CaptionCue) -> str:
    """Render one cue including its trailing blank separator line."""
    lines = [
        str(cue.sequence),
        f"{format_timestamp(cue.start_ms)} --> {format_timestamp(cue.end_ms)}",
        *cue.lines,
        "",
    ]
    return "\n".join(lines) + "\n"


def format_srt(cues: list[CaptionCue]) -> str:
    """Render cues as a SubRip document."""
    return "".join(format_cue(cue) for cue in cues)


def write_srt(cues: list[CaptionCue], output_path: str | Path) -> Path:
    """Write cues to an SRT file, creating parent directories.

    Returns:
        The path written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(format_srt(cues), encoding="utf-8")
    logger.info("SRT written: %d cues -> %s", len(cues), output_path)
    return output_path
