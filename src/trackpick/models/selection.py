"""Final selection model."""

from pydantic import BaseModel, Field

from .stream import StreamDescriptor, StreamKind


class Selection(BaseModel):
    """Streams retained for one ingested file.

    Subtitle descriptors may carry a generated ``caption_file``.
    ``caption_failures`` maps the index of a selected image-based subtitle
    to the reason its caption synthesis failed. ``extraction_failures``
    lists subtitles left out of the foreign audio search.
    """

    media_path: str
    video: list[StreamDescriptor] = Field(default_factory=list)
    audio: list[StreamDescriptor] = Field(default_factory=list)
    subtitle: list[StreamDescriptor] = Field(default_factory=list)
    caption_failures: dict[int, str] = Field(default_factory=dict)
    extraction_failures: list[int] = Field(default_factory=list)

    def for_kind(self, kind: StreamKind) -> list[StreamDescriptor]:
        return list(getattr(self, kind.value))

    @property
    def indices(self) -> list[int]:
        """All selected indices in mapping order."""
        return [s.index for s in (*self.video, *self.audio, *self.subtitle)]

    @property
    def caption_files(self) -> list[str]:
        return [s.caption_file for s in self.subtitle if s.caption_file]
