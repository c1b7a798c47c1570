"""Selection rule models.

Rules form a closed tagged union discriminated on the ``rule`` field, so
an unknown rule kind fails validation instead of being skipped.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Rule(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ResolutionRule(_Rule):
    """Narrow by video width: smallest, largest or an exact width."""

    rule: Literal["resolution"] = "resolution"
    mode: Literal["min", "max", "exact"]
    width: int | None = None

    @model_validator(mode="after")
    def _check_width(self) -> "ResolutionRule":
        if self.mode == "exact" and self.width is None:
            raise ValueError("exact resolution rule needs a width")
        return self


class DurationRule(_Rule):
    """Narrow by duration: shortest or longest."""

    rule: Literal["duration"] = "duration"
    mode: Literal["min", "max"]


class LanguageRule(_Rule):
    """Keep streams whose language tag is in the allow-list."""

    rule: Literal["language"] = "language"
    languages: list[str]


class CodecRule(_Rule):
    """Keep streams whose codec is in the allow-list (no-op for video)."""

    rule: Literal["codec"] = "codec"
    codecs: list[str]


class ForeignAudioRule(_Rule):
    """Keep subtitle tracks sparse enough to be foreign-dialogue only."""

    rule: Literal["foreign"] = "foreign"


SelectionRule = Annotated[
    Union[ResolutionRule, DurationRule, LanguageRule, CodecRule, ForeignAudioRule],
    Field(discriminator="rule"),
]

RuleChain = list[SelectionRule]
