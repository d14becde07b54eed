"""
Time parsing helpers for audio and video responses.

Dependencies: re
System role: Shared by the audio and video extractors
"""

import re
from dataclasses import dataclass

_TIMESTAMP = re.compile(r"(\d{1,2}):(\d{2})\s*[-–]\s*([^\n]+)")
_HOURS = re.compile(r"(\d+)\s*(?:hours?|hr)", re.IGNORECASE)
_MINUTES = re.compile(r"(\d+)\s*(?:minutes?|min)", re.IGNORECASE)
_SECONDS = re.compile(r"(\d+)\s*(?:seconds?|sec)", re.IGNORECASE)


@dataclass(frozen=True)
class Timestamp:
    """A "MM:SS - label" line from a model response."""

    seconds: int
    label: str


def format_seconds(seconds: float) -> str:
    """Render seconds as m:ss."""
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"


def parse_timestamps(text: str) -> list[Timestamp]:
    """Find every "m:ss - label" occurrence in order of appearance."""
    return [
        Timestamp(seconds=int(m.group(1)) * 60 + int(m.group(2)), label=m.group(3).strip())
        for m in _TIMESTAMP.finditer(text or "")
    ]


def duration_hint(metadata: dict | None) -> float | None:
    """Positive `duration_seconds` from document metadata, if present."""
    if not metadata:
        return None
    value = metadata.get("duration_seconds")
    try:
        duration = float(value)
    except (TypeError, ValueError):
        return None
    return duration if duration > 0 else None


def video_duration(text: str, default: float) -> float:
    """First minutes mention wins, then first seconds mention, else `default`."""
    match = _MINUTES.search(text or "")
    if match:
        return int(match.group(1)) * 60
    match = _SECONDS.search(text or "")
    if match:
        return int(match.group(1))
    return default


def audio_duration(text: str, default: float) -> float:
    """Sum of the first hours, minutes and seconds mentions, else `default`."""
    total = 0
    for pattern, factor in ((_HOURS, 3600), (_MINUTES, 60), (_SECONDS, 1)):
        match = pattern.search(text or "")
        if match:
            total += int(match.group(1)) * factor
    return total if total > 0 else default


def timeline_ranges(timestamps: list[Timestamp], duration: float) -> list[tuple[Timestamp, float]]:
    """
    Pair each timeline entry with its end time.

    Entries are sorted by time and repeated times are dropped (first label
    wins). Each entry ends where the next begins; the last one ends at
    `duration`, or at its own start when the stated duration is shorter.
    """
    ordered: list[Timestamp] = []
    for stamp in sorted(timestamps, key=lambda s: s.seconds):
        if ordered and ordered[-1].seconds == stamp.seconds:
            continue
        ordered.append(stamp)
    return [
        (stamp, ordered[i + 1].seconds if i + 1 < len(ordered) else max(duration, stamp.seconds))
        for i, stamp in enumerate(ordered)
    ]
