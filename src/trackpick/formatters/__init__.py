"""Output formatters for trackpick."""

from .default import format_default, format_quiet
from .json import format_json, format_json_list, to_dict
from .srt import format_cue, format_srt, format_timestamp, parse_timestamp, write_srt

__all__ = [
    "format_default",
    "format_quiet",
    "format_json",
    "format_json_list",
    "to_dict",
    "format_cue",
    "format_srt",
    "format_timestamp",
    "parse_timestamp",
    "write_srt",
]
