"""Parser for the compact sequence-code and cue strings.

A sequence code lists frame ranges and how long each range plays::

    0-1:3,2-3:3,4-5:4,8:3

Each entry is ``START[-END]:DURATION``; frames START..END (inclusive)
loop for DURATION seconds, then the next entry takes over.

A cue names the follow-up animation. ``MIN[-MAX]:NAME`` switches to
NAME after a random delay in [MIN, MAX) seconds, a bare ``NAME``
switches once the current animation completes.

Numbers are plain decimals with ``.`` as the fractional separator.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from errors import MalformedEncoding

SEGMENT_SEPARATOR = ","
DURATION_SEPARATOR = ":"
RANGE_SEPARATOR = "-"

_INT_RE = re.compile(r"[0-9]+")
_FLOAT_RE = re.compile(r"[0-9]+(?:\.[0-9]*)?|\.[0-9]+")


@dataclass(frozen=True)
class SequenceSegment:
    """Frames ``start``..``end`` (inclusive) played for ``duration`` seconds."""
    start: int
    end: int
    duration: float

    @property
    def frame_count(self) -> int:
        return self.end - self.start + 1

    def contains(self, frame: int) -> bool:
        return self.start <= frame <= self.end


@dataclass(frozen=True)
class DelayedCue:
    """Switch to ``target`` after a random delay in [min_seconds, max_seconds)."""
    min_seconds: float
    max_seconds: float
    target: str


@dataclass(frozen=True)
class ImmediateCue:
    """Switch to ``target`` as soon as the current animation completes."""
    target: str


CueSpec = DelayedCue | ImmediateCue


def _parse_int(token: str, encoding: str) -> int:
    token = token.strip()
    if not _INT_RE.fullmatch(token):
        raise MalformedEncoding("Invalid frame index", token, encoding)
    return int(token)


def _parse_seconds(token: str, encoding: str) -> float:
    token = token.strip()
    if not _FLOAT_RE.fullmatch(token):
        raise MalformedEncoding("Invalid number of seconds", token, encoding)
    return float(token)


def _parse_segment(entry: str, encoding: str) -> SequenceSegment:
    frames, sep, duration_token = entry.partition(DURATION_SEPARATOR)
    if not sep:
        raise MalformedEncoding("Segment lacks a duration", entry, encoding)

    bounds = frames.split(RANGE_SEPARATOR)
    if len(bounds) > 2:
        raise MalformedEncoding("Invalid frame range", frames.strip(), encoding)
    start = _parse_int(bounds[0], encoding)
    end = _parse_int(bounds[1], encoding) if len(bounds) > 1 else start
    if end < start:
        raise MalformedEncoding("Frame range ends before it starts", frames.strip(), encoding)

    duration = _parse_seconds(duration_token, encoding)
    if duration <= 0:
        raise MalformedEncoding("Segment duration must be positive", entry, encoding)
    return SequenceSegment(start, end, duration)


def parse_sequence(code: str | None) -> tuple[SequenceSegment, ...]:
    """Decode a sequence code into its segments.

    Returns an empty tuple for an empty (or blank) code, meaning the
    animation plays its frames linearly.
    """
    if code is None or not code.strip():
        return ()
    segments = []
    for raw in code.split(SEGMENT_SEPARATOR):
        entry = raw.strip()
        if not entry:
            raise MalformedEncoding("Empty segment", raw, code)
        segments.append(_parse_segment(entry, code))
    return tuple(segments)


def parse_cue(cue: str | None) -> CueSpec | None:
    """Decode a cue string; ``None`` when there is no cue."""
    if cue is None or not cue.strip():
        return None
    text = cue.strip()

    if DURATION_SEPARATOR not in text:
        return ImmediateCue(text)

    delay, _, target = text.partition(DURATION_SEPARATOR)
    target = target.strip()
    if not target:
        raise MalformedEncoding("Cue lacks an animation name", text, cue)

    bounds = delay.split(RANGE_SEPARATOR)
    if len(bounds) > 2:
        raise MalformedEncoding("Invalid delay range", delay.strip(), cue)
    min_seconds = _parse_seconds(bounds[0], cue)
    max_seconds = _parse_seconds(bounds[1], cue) if len(bounds) > 1 else min_seconds
    if max_seconds < min_seconds:
        raise MalformedEncoding("Delay range ends before it starts", delay.strip(), cue)
    return DelayedCue(min_seconds, max_seconds, target)


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_sequence(segments) -> str:
    """Encode segments back into a sequence code."""
    entries = []
    for segment in segments:
        frames = str(segment.start)
        if segment.end != segment.start:
            frames += f"{RANGE_SEPARATOR}{segment.end}"
        entries.append(f"{frames}{DURATION_SEPARATOR}{_format_number(segment.duration)}")
    return SEGMENT_SEPARATOR.join(entries)


def format_cue(cue: CueSpec | None) -> str:
    """Encode a cue back into its string form ("" for no cue)."""
    if cue is None:
        return ""
    if isinstance(cue, ImmediateCue):
        return cue.target
    delay = _format_number(cue.min_seconds)
    if cue.max_seconds != cue.min_seconds:
        delay += f"{RANGE_SEPARATOR}{_format_number(cue.max_seconds)}"
    return f"{delay}{DURATION_SEPARATOR}{cue.target}"
