"""Per-ingestion context passed to every selection step."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from trackpick.config import TrackpickConfig, get_config
from trackpick.extractors.base import BaseToolkit


@dataclass(frozen=True)
class IngestionContext:
    """Everything one ingestion run needs besides the candidates.

    Attributes:
        media_path: The container being processed
        toolkit: Collaborator used for probing and transcript extraction
        config: Configuration loaded for this run
        extraction_failures: Subtitle indices whose transcript could not be
            extracted during the foreign audio search
    """

    media_path: str
    toolkit: BaseToolkit
    config: TrackpickConfig = field(default_factory=get_config)
    extraction_failures: list[int] = field(default_factory=list, compare=False)

    @property
    def stem(self) -> str:
        return Path(self.media_path).stem
