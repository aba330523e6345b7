"""
gemscribe.utils - Shared utility functions.

Contains common functions used across multiple modules to avoid duplication.
"""

from __future__ import annotations

import re

_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def format_duration(seconds: float) -> str:
    """Format seconds as HH:MM:SS or MM:SS.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (HH:MM:SS if >= 1 hour, otherwise MM:SS)
    """
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def sanitize_filename(name: str, fallback: str = "untitled") -> str:
    """Make a user-supplied base name safe to use as a file name.

    Replaces path separators, reserved characters, and control characters
    with underscores and collapses runs of whitespace.

    Args:
        name: Raw base name (no extension)
        fallback: Name used when nothing usable remains

    Returns:
        Sanitized file name
    """
    cleaned = re.sub(r"\s+", " ", name)
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", cleaned).strip(" .")
    return cleaned or fallback


def mask_secret(secret: str, visible: int = 4) -> str:
    """Mask all but the last few characters of a secret."""
    if not secret:
        return ""
    if len(secret) <= visible:
        return "*" * len(secret)
    return "*" * (len(secret) - visible) + secret[-visible:]
