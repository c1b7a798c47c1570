"""OCR transcript parser.

Turns the frame log printed by ffmpeg's ``ocr`` + ``metadata=mode=print``
filters into caption cues. The log looks like::

    frame:0    pts:0       pts_time:0
    lavfi.ocr.text=
    frame:1    pts:1001    pts_time:1.001
    lavfi.ocr.text=Where are you going?
    I'll be right back.
    frame:2    pts:2869    pts_time:2.869
    lavfi.ocr.text=

Each marker line is followed by exactly one text line; every further line
up to the next marker continues that frame's text. A bitmap subtitle
stays on screen until a frame with different text replaces it, so a cue
runs from its first frame's time to the time of the first frame showing
something else.
"""

import logging
import re
from enum import Enum

from trackpick.exceptions import MalformedOcrFrame
from trackpick.models import CaptionCue, RawOcrFrame

logger = logging.getLogger(__name__)

DEFAULT_TEXT_PREFIX = "lavfi.ocr.text="

MARKER_RE = re.compile(r"^\s*frame:\s*(\d+)(?:\s|$)")
PTS_TIME_RE = re.compile(r"\bpts_time:\s*(-?\d+(?:\.\d*)?(?:[eE][-+]?\d+)?)")


class ParserState(Enum):
    EXPECT_FRAME = "expect_frame"
    HAVE_OPEN_CUE = "have_open_cue"
    DONE = "done"


def seconds_to_ms(seconds: float) -> int:
    """Convert seconds to whole milliseconds."""
    return int(round(seconds * 1000))


class OcrTranscriptParser:
    """Two-state parser over an OCR frame log.

    Grouping policy: a frame repeating the open cue's text extends that cue.
    A frame with different text closes the open cue at its own time, and if
    that text is not blank it opens the next cue starting at the same time.
    A cue still open at end of input has no end time and is dropped.
    """

    def __init__(self, transcript: str, text_prefix: str = DEFAULT_TEXT_PREFIX):
        self.text_prefix = text_prefix
        self._lines = transcript.splitlines()
        self._pos = 0

    def parse(self) -> list[CaptionCue]:
        """Parse the whole transcript.

        Returns:
            Cues numbered from 1 in transcript order

        Raises:
            MalformedOcrFrame: If a frame marker is not followed by its text line
        """
        cues: list[CaptionCue] = []
        state = ParserState.EXPECT_FRAME
        open_frame: RawOcrFrame | None = None

        while state is not ParserState.DONE:
            frame = self._read_frame()

            if frame is None:
                if open_frame is not None:
                    logger.debug(
                        "Dropping trailing cue from frame %d, no closing frame",
                        open_frame.frame_index,
                    )
                state = ParserState.DONE
            elif open_frame is None:
                if frame.has_text:
                    open_frame = frame
                    state = ParserState.HAVE_OPEN_CUE
            elif cue_lines(frame) == cue_lines(open_frame):
                # Same caption still on screen
                continue
            else:
                cues.append(self._make_cue(len(cues) + 1, open_frame, frame))
                if frame.has_text:
                    open_frame = frame
                else:
                    open_frame = None
                    state = ParserState.EXPECT_FRAME

        return cues

    def _next_marker(self) -> re.Match[str] | None:
        """Advance to the next marker line and return its match."""
        lines = self._lines
        while self._pos < len(lines):
            match = MARKER_RE.match(lines[self._pos])
            if match:
                return match
            # Anything before the first marker is banner noise
            logger.debug("Skipping line %d outside a frame: %r", self._pos + 1, lines[self._pos])
            self._pos += 1
        return None

    def _read_frame(self) -> RawOcrFrame | None:
        """Consume one marker, its text line and any continuation lines.

        Returns ``None`` at end of input, including end of input right
        after a marker.
        """
        match = self._next_marker()
        if match is None:
            return None

        lines = self._lines
        marker = lines[self._pos]
        marker_line_number = self._pos + 1
        frame_index = int(match.group(1))
        time_match = PTS_TIME_RE.search(marker)
        time_seconds = float(time_match.group(1)) if time_match else -1.0
        self._pos += 1

        if self._pos >= len(lines):
            return None

        text_line = lines[self._pos].lstrip()
        if not text_line.startswith(self.text_prefix):
            raise MalformedOcrFrame(
                f"frame {frame_index} has no OCR text line", self._pos + 1, lines[self._pos]
            )
        self._pos += 1

        text = [text_line[len(self.text_prefix):]]
        while self._pos < len(lines) and not MARKER_RE.match(lines[self._pos]):
            text.append(lines[self._pos])
            self._pos += 1

        return RawOcrFrame(
            frame_index=frame_index,
            time_seconds=time_seconds,
            text="\n".join(text),
            line_number=marker_line_number,
        )

    @staticmethod
    def _make_cue(sequence: int, opening: RawOcrFrame, closing: RawOcrFrame) -> CaptionCue:
        return CaptionCue(
            sequence=sequence,
            start_ms=seconds_to_ms(opening.time_seconds),
            end_ms=seconds_to_ms(closing.time_seconds),
            lines=cue_lines(opening),
        )


def cue_lines(frame: RawOcrFrame) -> list[str]:
    """Stripped text lines of a frame, without leading or trailing blanks."""
    lines = [line.strip() for line in (frame.text or "").split("\n")]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return lines


def parse_ocr_transcript(transcript: str, text_prefix: str = DEFAULT_TEXT_PREFIX) -> list[CaptionCue]:
    """Parse an OCR frame log into caption cues.

    Raises:
        MalformedOcrFrame: If a frame marker is not followed by its text line;
            no cues are returned in that case
    """
    return OcrTranscriptParser(transcript, text_prefix=text_prefix).parse()
