"""Base toolkit class and retry policy for external media tools."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from trackpick.exceptions import ExternalProcessError


def _is_retriable(exc: BaseException) -> bool:
    return isinstance(exc, ExternalProcessError) and exc.retriable


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry for transient external-process failures.

    Attributes:
        attempts: Total attempts including the first (1 disables retrying)
        delay_seconds: Wait before the first retry, doubled for each further one
        max_delay_seconds: Upper bound for a single wait
    """

    attempts: int = 1
    delay_seconds: float = 2.0
    max_delay_seconds: float = 60.0

    def retrying(self, logger: logging.Logger) -> Retrying:
        """Build a tenacity controller for one invocation."""
        return Retrying(
            stop=stop_after_attempt(max(1, self.attempts)),
            wait=wait_exponential(multiplier=self.delay_seconds, max=self.max_delay_seconds),
            retry=retry_if_exception(_is_retriable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )


class BaseToolkit(ABC):
    """Abstract base class for the media tools trackpick calls out to.

    A toolkit probes containers and dumps subtitle streams as text. Every
    call is blocking and all-or-nothing: it either returns the complete
    output or raises.

    Attributes:
        name: Human-readable name of the toolkit
    """

    name: ClassVar[str] = "base"

    @classmethod
    @abstractmethod
    def is_available(cls) -> bool:
        """Check if the toolkit's binaries are installed."""
        pass

    @abstractmethod
    def probe(self, path: str) -> dict[str, Any]:
        """Return structured stream metadata for a media file.

        Raises:
            ExternalProcessError: If the probe process fails
            MalformedProbeData: If the output cannot be parsed
        """
        pass

    @abstractmethod
    def extract_transcript(self, path: str, stream_index: int, format_hint: str = "srt") -> str:
        """Dump a text subtitle stream in the given format.

        Raises:
            ExtractionFailure: If the stream cannot be extracted
        """
        pass

    @abstractmethod
    def extract_ocr_transcript(
        self, path: str, stream_index: int, size: tuple[int, int] | None = None
    ) -> str:
        """Run OCR over a bitmap subtitle stream and return the frame log.

        Raises:
            ExtractionFailure: If the stream cannot be extracted
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
