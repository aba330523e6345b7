"""
gemscribe.io - Artifact files: atomic writes and collision-free naming.

Transcripts, dictionaries, and subtitles are saved under timestamped names
so a new run never clobbers an earlier result.
"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime
from pathlib import Path

from gemscribe.utils import sanitize_filename


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def write_text(path: Path, content: str) -> None:
    """Write UTF-8 text through a sibling temp file so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        prefix=f".{path.name}.",
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(content)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
    try:
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def artifact_path(
    directory: Path,
    base_name: str,
    suffix: str,
    now: datetime | None = None,
) -> Path:
    """Build a timestamped, collision-free artifact path.

    The name has the form ``<base>_<YYYYmmdd_HHMMSS>.<suffix>``; if that
    already exists a counter is appended (``_1``, ``_2``, ...).

    Args:
        directory: Output directory
        base_name: User-supplied base name (sanitized here)
        suffix: File extension without the dot
        now: Timestamp override

    Returns:
        Path that does not exist yet
    """
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    stem = f"{sanitize_filename(base_name)}_{stamp}"
    ext = suffix.lstrip(".")

    candidate = directory / f"{stem}.{ext}"
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem}_{counter}.{ext}"
        counter += 1
    return candidate


def save_artifact(
    directory: Path,
    base_name: str,
    content: str,
    suffix: str = "srt",
    now: datetime | None = None,
) -> Path:
    """Save a result artifact without overwriting existing files.

    Args:
        directory: Output directory (created if missing)
        base_name: User-supplied base name
        content: Text to write
        suffix: File extension (default: srt)
        now: Timestamp override

    Returns:
        Path the artifact was written to
    """
    directory = directory.expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    path = artifact_path(directory, base_name, suffix, now=now)
    write_text(path, content)
    return path


def load_artifact(path: Path) -> str:
    """Load a previously saved artifact."""
    return read_text(path.expanduser())
