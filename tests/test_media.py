"""Tests for gemscribe.media module."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from gemscribe.media import DEFAULT_MIME_TYPE, guess_mime_type, probe_duration


class TestGuessMimeType:
    def test_audio(self) -> None:
        assert guess_mime_type(Path("talk.wav")) == "audio/wav"
        assert guess_mime_type(Path("talk.mp3")) == "audio/mp3"

    def test_video(self) -> None:
        assert guess_mime_type(Path("clip.mp4")) == "video/mp4"
        assert guess_mime_type(Path("clip.mov")) == "video/quicktime"

    def test_extension_case_insensitive(self) -> None:
        assert guess_mime_type(Path("CLIP.MP4")) == "video/mp4"

    def test_unknown_extension(self) -> None:
        assert guess_mime_type(Path("data.unknownext")) == DEFAULT_MIME_TYPE

    def test_no_extension(self) -> None:
        assert guess_mime_type(Path("recording")) == DEFAULT_MIME_TYPE


class TestProbeDuration:
    def test_without_ffprobe(self, tmp_path: Path) -> None:
        with patch("gemscribe.media.shutil.which", return_value=None):
            assert probe_duration(tmp_path / "a.wav") is None

    def test_reads_format_duration(self, tmp_path: Path) -> None:
        completed = MagicMock(
            returncode=0, stdout=json.dumps({"format": {"duration": "125.5"}}), stderr=""
        )
        with (
            patch("gemscribe.media.shutil.which", return_value="/usr/bin/ffprobe"),
            patch("gemscribe.media.subprocess.run", return_value=completed) as run,
        ):
            assert probe_duration(tmp_path / "a.wav") == 125.5

        cmd = run.call_args.args[0]
        assert cmd[0] == "/usr/bin/ffprobe"
        assert cmd[-1] == str(tmp_path / "a.wav")

    def test_ffprobe_error(self, tmp_path: Path) -> None:
        completed = MagicMock(returncode=1, stdout="", stderr="Invalid data")
        with (
            patch("gemscribe.media.shutil.which", return_value="/usr/bin/ffprobe"),
            patch("gemscribe.media.subprocess.run", return_value=completed),
        ):
            assert probe_duration(tmp_path / "a.wav") is None

    def test_ffprobe_timeout(self, tmp_path: Path) -> None:
        with (
            patch("gemscribe.media.shutil.which", return_value="/usr/bin/ffprobe"),
            patch(
                "gemscribe.media.subprocess.run",
                side_effect=subprocess.TimeoutExpired("ffprobe", 30),
            ),
        ):
            assert probe_duration(tmp_path / "a.wav") is None

    def test_zero_duration(self, tmp_path: Path) -> None:
        completed = MagicMock(returncode=0, stdout=json.dumps({"format": {}}), stderr="")
        with (
            patch("gemscribe.media.shutil.which", return_value="/usr/bin/ffprobe"),
            patch("gemscribe.media.subprocess.run", return_value=completed),
        ):
            assert probe_duration(tmp_path / "a.wav") is None
