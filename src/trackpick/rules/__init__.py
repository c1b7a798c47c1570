"""Stream selection rules."""

from trackpick.rules.engine import apply_rule, select
from trackpick.rules.foreign_audio import count_cues, select_foreign_audio
from trackpick.rules.subtitles import select_subtitles

__all__ = [
    "select",
    "apply_rule",
    "select_subtitles",
    "select_foreign_audio",
    "count_cues",
]
