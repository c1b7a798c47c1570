"""JSON selection reports.

A report lists, per ingested file, the kept streams by kind with any
generated caption files, plus the caption and extraction failures.
"""

import json
from typing import Any

from trackpick.models import Selection


def format_json(selection: Selection, indent: int = 2) -> str:
    """Render one file's selection report."""
    return selection.model_dump_json(indent=indent)


def format_json_list(selections: list[Selection], indent: int = 2) -> str:
    """Render the ``-o`` report for a CLI run: one selection per input file,
    in argument order. Files that failed to ingest are absent.
    """
    return json.dumps([to_dict(s) for s in selections], indent=indent, ensure_ascii=False)


def to_dict(selection: Selection) -> dict[str, Any]:
    """Selection as plain JSON types, stream kinds as their string values."""
    return selection.model_dump(mode="json")
