"""Stream descriptor models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StreamKind(str, Enum):
    """Elementary stream kinds trackpick selects from."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"


class StreamDescriptor(BaseModel):
    """One elementary stream of the probed container.

    The catalog index is the stream's identity. Descriptors are frozen;
    the only derived annotation, ``caption_file``, is attached through
    :meth:`with_caption_file` which returns a copy.
    """

    model_config = ConfigDict(frozen=True)

    index: int
    kind: StreamKind
    codec_name: str | None = None
    width: int | None = None
    height: int | None = None
    duration: float | None = None
    frame_count: int | None = None
    language: str | None = None
    title: str | None = None
    tags: dict[str, Any] = Field(default_factory=dict)
    caption_file: str | None = None

    @property
    def comparable_duration(self) -> float | None:
        """Duration used by duration rules.

        Declared duration first, then the frame-count tag. ``None`` means
        the duration is undefined.
        """
        if self.duration is not None:
            return self.duration
        if self.frame_count is not None:
            return float(self.frame_count)
        return None

    def with_caption_file(self, path: str) -> "StreamDescriptor":
        """Return a copy annotated with a generated caption file."""
        return self.model_copy(update={"caption_file": path})


class Catalog(BaseModel):
    """Probe result partitioned into per-kind candidate sets."""

    video: list[StreamDescriptor] = Field(default_factory=list)
    audio: list[StreamDescriptor] = Field(default_factory=list)
    subtitle: list[StreamDescriptor] = Field(default_factory=list)
    format: dict[str, Any] = Field(default_factory=dict)

    @property
    def nb_streams(self) -> int:
        return len(self.video) + len(self.audio) + len(self.subtitle)
