"""
gemscribe.srt - SRT parsing, validation, and rendering.

Handles conversion between SRT text and subtitle records, and checks
generated subtitles for numbering and timing mistakes.
"""

from __future__ import annotations

import re

from pydantic import BaseModel

TIMESTAMP_PATTERN = re.compile(r"^\d{2}:\d{2}:\d{2},\d{3}$")
TIME_LINE_PATTERN = re.compile(r"(\d{2}:\d{2}:\d{2},\d{3}) --> (\d{2}:\d{2}:\d{2},\d{3})")


class SrtSubtitle(BaseModel):
    """A single subtitle block."""

    index: int
    start_time: str
    end_time: str
    text: str


class SrtValidation(BaseModel):
    """Outcome of validate_srt."""

    is_valid: bool
    errors: list[str] = []


def srt_timestamp_to_seconds(timestamp: str) -> float:
    """Convert an SRT timestamp to seconds.

    Args:
        timestamp: Timestamp in HH:MM:SS,mmm format

    Returns:
        Time in seconds
    """
    time_part, _, millis = timestamp.partition(",")
    hours, minutes, seconds = (int(p) for p in time_part.split(":"))
    return hours * 3600 + minutes * 60 + seconds + int(millis or 0) / 1000


def seconds_to_srt_timestamp(seconds: float) -> str:
    """Convert seconds to an SRT timestamp (HH:MM:SS,mmm)."""
    total_ms = round(seconds * 1000)
    ms = total_ms % 1000
    total_seconds = total_ms // 1000
    ss = total_seconds % 60
    mm = (total_seconds // 60) % 60
    hh = total_seconds // 3600
    return f"{hh:02d}:{mm:02d}:{ss:02d},{ms:03d}"


def parse_srt(content: str) -> list[SrtSubtitle]:
    """Parse SRT text into subtitle records.

    Blocks are separated by blank lines. Blocks with fewer than three lines,
    a non-numeric index, or no timing line are skipped.

    Args:
        content: SRT text

    Returns:
        List of parsed subtitles in file order
    """
    subtitles = []
    normalized = content.replace("\r\n", "\n").strip()

    for block in re.split(r"\n\s*\n", normalized):
        lines = block.strip().split("\n")
        if len(lines) < 3:
            continue

        try:
            index = int(lines[0].strip())
        except ValueError:
            continue

        match = TIME_LINE_PATTERN.search(lines[1])
        if not match:
            continue

        subtitles.append(
            SrtSubtitle(
                index=index,
                start_time=match.group(1),
                end_time=match.group(2),
                text="\n".join(lines[2:]),
            )
        )

    return subtitles


def render_srt(subtitles: list[SrtSubtitle]) -> str:
    """Render subtitle records back into SRT text."""
    return "\n".join(
        f"{sub.index}\n{sub.start_time} --> {sub.end_time}\n{sub.text}\n" for sub in subtitles
    )


def validate_srt(content: str) -> SrtValidation:
    """Validate SRT numbering and timing.

    Checks that subtitles exist, indices run 1..n, timestamps are well
    formed, every cue ends after it starts, and no cue overlaps the previous.

    Args:
        content: SRT text

    Returns:
        SrtValidation with collected error messages
    """
    errors: list[str] = []
    subtitles = parse_srt(content)

    if not subtitles:
        return SrtValidation(is_valid=False, errors=["No valid subtitles found"])

    for position, sub in enumerate(subtitles, start=1):
        if sub.index != position:
            errors.append(f"Subtitle {position} has index {sub.index}")

    for sub in subtitles:
        if not TIMESTAMP_PATTERN.match(sub.start_time):
            errors.append(f"Subtitle {sub.index} has a malformed start time")
        if not TIMESTAMP_PATTERN.match(sub.end_time):
            errors.append(f"Subtitle {sub.index} has a malformed end time")

    previous_end = None
    for sub in subtitles:
        start = srt_timestamp_to_seconds(sub.start_time)
        end = srt_timestamp_to_seconds(sub.end_time)

        if start >= end:
            errors.append(f"Subtitle {sub.index} starts at or after its end time")

        if previous_end is not None and start < previous_end:
            errors.append(f"Subtitle {sub.index} overlaps the previous subtitle")
        previous_end = end

    return SrtValidation(is_valid=not errors, errors=errors)
