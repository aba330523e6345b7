"""
gemscribe.media - Media type detection and duration probing.

Maps file extensions to the MIME types the Gemini Files API accepts and
reads media duration with ffprobe when it is available.
"""

from __future__ import annotations

import json
import logging
import mimetypes
import shutil
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

MEDIA_MIME_TYPES: dict[str, str] = {
    ".wav": "audio/wav",
    ".mp3": "audio/mp3",
    ".aiff": "audio/aiff",
    ".aif": "audio/aiff",
    ".aac": "audio/aac",
    ".ogg": "audio/ogg",
    ".flac": "audio/flac",
    ".m4a": "audio/mp4",
    ".mp4": "video/mp4",
    ".mpeg": "video/mpeg",
    ".mpg": "video/mpeg",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".webm": "video/webm",
    ".wmv": "video/x-ms-wmv",
    ".flv": "video/x-flv",
    ".3gp": "video/3gpp",
}


def guess_mime_type(path: Path) -> str:
    """Derive a MIME type from the file extension.

    Args:
        path: Media file path

    Returns:
        MIME type string, application/octet-stream when unrecognized
    """
    suffix = path.suffix.lower()
    if suffix in MEDIA_MIME_TYPES:
        return MEDIA_MIME_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or DEFAULT_MIME_TYPE


def probe_duration(path: Path) -> float | None:
    """Probe media duration in seconds using ffprobe.

    Returns None when ffprobe is not installed or cannot read the file;
    duration is only used to calibrate prompt pacing.
    """
    ffprobe_path = shutil.which("ffprobe")
    if not ffprobe_path:
        logger.debug("ffprobe not found in PATH; skipping duration probe")
        return None

    cmd = [
        ffprobe_path,
        "-v",
        "quiet",
        "-print_format",
        "json",
        "-show_format",
        str(path),
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=30)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning("ffprobe failed for %s: %s", path, e)
        return None

    if result.returncode != 0:
        logger.warning("ffprobe failed for %s: %s", path, result.stderr.strip())
        return None

    try:
        data = json.loads(result.stdout)
        duration = float(data.get("format", {}).get("duration", 0))
    except (json.JSONDecodeError, TypeError, ValueError):
        return None

    return duration if duration > 0 else None
