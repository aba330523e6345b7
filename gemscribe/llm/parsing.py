"""
gemscribe.llm.parsing - Recover subtitle payloads from model output.

Models often wrap their answer in a markdown code fence, sometimes with a
format tag, sometimes with chatter around it. extract_fenced_content picks
one fenced block deterministically and returns its contents.

Selection rules:
- Fences are paired top to bottom: any line starting with ``` opens a
  block, and the next line reading exactly ``` closes it. A closer is
  never reused as an opener.
- A tagged opener is a line reading ```srt (tag case-insensitive); a generic
  opener is a line reading exactly ```. Blocks with any other tag
  (```json, ```text, ...) are never selected.
- The first tagged block wins; without one, the first generic block.
  Later blocks are ignored.
- No opener, or an opener without a closer: the input is returned stripped
  of surrounding whitespace.
- An empty block returns "".
"""

from __future__ import annotations

from typing import NamedTuple

FENCE = "```"
SUBTITLE_TAGS = frozenset({"srt"})


class FencedBlock(NamedTuple):
    tag: str
    start: int
    end: int | None  # None when the block is never closed


def _scan_blocks(lines: list[str]) -> list[FencedBlock]:
    blocks: list[FencedBlock] = []
    start: int | None = None
    tag = ""
    for i, line in enumerate(lines):
        stripped = line.strip()
        if start is None:
            if stripped.startswith(FENCE):
                start = i
                tag = stripped[len(FENCE) :].strip().lower()
        elif stripped == FENCE:
            blocks.append(FencedBlock(tag, start, i))
            start = None
    if start is not None:
        blocks.append(FencedBlock(tag, start, None))
    return blocks


def _select_block(lines: list[str]) -> FencedBlock | None:
    """The block to extract from, or None."""
    blocks = _scan_blocks(lines)
    for block in blocks:
        if block.tag in SUBTITLE_TAGS:
            return block
    for block in blocks:
        if not block.tag:
            return block
    return None


def extract_fenced_content(text: str) -> str:
    """Extract the payload of the preferred fenced block.

    Idempotent: the returned block never contains a bare fence line, so a
    second pass finds no complete block and returns the text unchanged.

    Args:
        text: Raw model output

    Returns:
        Contents of the chosen fenced block, or the stripped input when no
        complete block exists
    """
    lines = text.splitlines()

    block = _select_block(lines)
    if block is None or block.end is None:
        return text.strip()

    return "\n".join(lines[block.start + 1 : block.end]).strip()


def has_fenced_block(text: str) -> bool:
    """Whether extract_fenced_content would strip a fence from text."""
    block = _select_block(text.splitlines())
    return block is not None and block.end is not None
