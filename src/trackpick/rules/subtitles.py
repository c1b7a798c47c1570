"""Subtitle selection over several independent rule-sets."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from trackpick.models import SelectionRule, StreamDescriptor, StreamKind
from trackpick.rules.engine import select

if TYPE_CHECKING:
    from trackpick.context import IngestionContext

logger = logging.getLogger(__name__)


def select_subtitles(
    candidates: Sequence[StreamDescriptor],
    rule_sets: Sequence[Sequence[SelectionRule]],
    ctx: IngestionContext | None = None,
) -> list[StreamDescriptor]:
    """Run each rule-set against a shrinking pool of subtitle streams.

    Every rule-set picks one subtitle role (forced, full, ...). Streams
    picked by a rule-set are removed from the pool before the next one
    runs, so no stream is selected twice. A rule-set may pick nothing.

    Returns:
        Selected streams, grouped by rule-set in rule-set order
    """
    pool = list(candidates)
    selected: list[StreamDescriptor] = []

    for number, rules in enumerate(rule_sets, start=1):
        if not pool:
            logger.debug("Subtitle pool exhausted before rule-set %d", number)
            break
        picked = select(pool, rules, ctx=ctx, kind=StreamKind.SUBTITLE)
        logger.info("Subtitle rule-set %d selected %s", number, [s.index for s in picked])

        picked_indices = {s.index for s in picked}
        selected.extend(picked)
        pool = [s for s in pool if s.index not in picked_indices]

    return selected
