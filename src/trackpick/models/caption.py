"""Caption cue models."""

from pydantic import BaseModel, Field


class RawOcrFrame(BaseModel):
    """One OCR frame emission read from a transcript."""

    frame_index: int
    time_seconds: float = -1.0
    text: str | None = None
    line_number: int = 0

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())


class CaptionCue(BaseModel):
    """One timed caption entry."""

    sequence: int = Field(ge=1)
    start_ms: int
    end_ms: int
    lines: list[str] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)
