"""Pydantic models for trackpick."""

from .caption import CaptionCue, RawOcrFrame
from .rules import (
    CodecRule,
    DurationRule,
    ForeignAudioRule,
    LanguageRule,
    ResolutionRule,
    RuleChain,
    SelectionRule,
)
from .selection import Selection
from .stream import Catalog, StreamDescriptor, StreamKind

__all__ = [
    # Streams
    "StreamKind",
    "StreamDescriptor",
    "Catalog",
    # Rules
    "SelectionRule",
    "RuleChain",
    "ResolutionRule",
    "DurationRule",
    "LanguageRule",
    "CodecRule",
    "ForeignAudioRule",
    # Captions
    "CaptionCue",
    "RawOcrFrame",
    # Result
    "Selection",
]
