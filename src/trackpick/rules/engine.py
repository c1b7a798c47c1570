"""Rule engine narrowing a candidate set with an ordered rule chain."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from trackpick.exceptions import InvalidRuleConfiguration
from trackpick.models import (
    CodecRule,
    DurationRule,
    ForeignAudioRule,
    LanguageRule,
    ResolutionRule,
    SelectionRule,
    StreamDescriptor,
    StreamKind,
)
from trackpick.rules.foreign_audio import select_foreign_audio

if TYPE_CHECKING:
    from trackpick.context import IngestionContext

logger = logging.getLogger(__name__)


def select(
    candidates: Sequence[StreamDescriptor],
    chain: Sequence[SelectionRule],
    ctx: IngestionContext | None = None,
    kind: StreamKind | None = None,
) -> list[StreamDescriptor]:
    """Narrow ``candidates`` by applying ``chain`` in order.

    A single candidate is returned as is without evaluating any rule.
    Otherwise rules run in order until exactly one candidate remains; the
    rules after that point are not evaluated.

    Args:
        candidates: Streams of one kind in catalog order
        chain: Ordered rules for that kind
        ctx: Ingestion context, required by the foreign audio rule
        kind: Stream kind, inferred from the candidates when omitted

    Returns:
        The surviving candidates, in catalog order (possibly empty)

    Raises:
        InvalidRuleConfiguration: If the chain holds an unsupported rule
    """
    selected = list(candidates)
    if kind is None and selected:
        kind = selected[0].kind

    if len(selected) == 1:
        logger.debug("One %s stream in source, selecting by default", kind.value if kind else "")
        return selected

    for rule in chain:
        # Only one left, later rules must not run
        if len(selected) == 1:
            break
        before = len(selected)
        selected = apply_rule(rule, selected, ctx=ctx, kind=kind)
        logger.debug("%s: %d -> %d candidates", rule.rule, before, len(selected))

    return selected


def apply_rule(
    rule: SelectionRule,
    candidates: list[StreamDescriptor],
    ctx: IngestionContext | None = None,
    kind: StreamKind | None = None,
) -> list[StreamDescriptor]:
    """Apply one rule to a candidate set."""
    if isinstance(rule, ResolutionRule):
        if rule.mode == "exact":
            logger.info("Selecting by exact width %s", rule.width)
            matches = [c for c in candidates if c.width == rule.width]
            if not matches and any(c.width is None for c in candidates):
                logger.debug("Width unknown for some candidates, keeping all")
                return list(candidates)
            return matches
        logger.info("Selecting by %s resolution", rule.mode)
        return _keep_extreme(candidates, lambda c: c.width, rule.mode, keep_unknown=False)

    if isinstance(rule, DurationRule):
        logger.info("Selecting by %s duration", rule.mode)
        return _keep_extreme(candidates, lambda c: c.comparable_duration, rule.mode)

    if isinstance(rule, LanguageRule):
        logger.info("Selecting by language: %s", ", ".join(rule.languages))
        return [c for c in candidates if c.language in rule.languages]

    if isinstance(rule, CodecRule):
        if kind is StreamKind.VIDEO:
            return candidates
        logger.info("Selecting by codec: %s", ", ".join(rule.codecs))
        return [c for c in candidates if c.codec_name in rule.codecs]

    if isinstance(rule, ForeignAudioRule):
        if kind is not None and kind is not StreamKind.SUBTITLE:
            raise InvalidRuleConfiguration(f"foreign audio rule applied to {kind.value} streams", rule)
        if ctx is None:
            raise InvalidRuleConfiguration("foreign audio rule needs an ingestion context", rule)
        logger.info("Selecting subtitles by foreign audio search")
        return select_foreign_audio(candidates, ctx)

    raise InvalidRuleConfiguration("unsupported selection rule", rule)


def _keep_extreme(
    candidates: list[StreamDescriptor],
    key: Callable[[StreamDescriptor], float | int | None],
    mode: str,
    keep_unknown: bool = True,
) -> list[StreamDescriptor]:
    """Keep every candidate at the min/max of ``key``.

    Candidates whose value is unknown take no part in finding the extreme.
    They are kept alongside it when ``keep_unknown`` is set. With no known
    value at all the set is returned unchanged.
    """
    if mode not in ("min", "max"):
        raise InvalidRuleConfiguration("invalid min/max specifier", mode)

    values = [v for v in (key(c) for c in candidates) if v is not None]
    if not values:
        return list(candidates)

    target = max(values) if mode == "max" else min(values)
    return [c for c in candidates if key(c) == target or (keep_unknown and key(c) is None)]
