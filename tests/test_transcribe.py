"""Tests for gemscribe.llm.transcribe."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from gemscribe.config import GemscribeConfig
from gemscribe.exceptions import MediaNotFoundError, PollTimeoutError
from gemscribe.llm.client import GeminiClient
from gemscribe.llm.models import GenerationResult, RemoteFile
from gemscribe.llm.templates import PromptTemplateManager
from gemscribe.llm.transcribe import TranscriptionOptions, transcribe_media

SRT_BODY = (
    "1\n00:00:00,000 --> 00:00:02,000\nHello there.\n\n"
    "2\n00:00:02,100 --> 00:00:04,000\nGoodbye."
)


def _make_mock_client(remote: RemoteFile, text: str) -> MagicMock:
    client = MagicMock()
    client.model = "gemini-2.5-pro"
    client.upload_file.return_value = remote
    client.wait_until_active.return_value = remote
    client.generate_from_file.return_value = GenerationResult(text=text, model="gemini-2.5-pro")
    return client


class FakeGeminiService:
    """Routes requests the way the Gemini API would for one upload."""

    def __init__(self, remote_file_json, states: list[str], reply: str) -> None:
        self.remote_file_json = remote_file_json
        self.states = iter(states)
        self.reply = reply
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/upload/v1beta/files":
            return httpx.Response(200, json={"file": self.remote_file_json(state="PROCESSING")})
        if path == "/v1beta/files/abc123":
            return httpx.Response(200, json=self.remote_file_json(state=next(self.states)))
        if path.endswith(":generateContent"):
            body: dict[str, Any] = {
                "candidates": [{"content": {"parts": [{"text": self.reply}]}}],
            }
            return httpx.Response(200, json=body)
        return httpx.Response(404, text=f"unexpected path {path}")


class TestTranscribeMedia:
    def test_end_to_end(self, media_file: Path, remote_file_json, fake_sleep) -> None:
        reply = f"Here is the SRT:\n```srt\n{SRT_BODY}\n```\nLet me know if you need changes."
        service = FakeGeminiService(remote_file_json, ["PROCESSING", "ACTIVE"], reply)
        client = GeminiClient(
            api_key="test-key",
            transport=httpx.MockTransport(service),
            sleep=fake_sleep,
        )

        with client:
            result = transcribe_media(media_file, client, PromptTemplateManager())

        assert result == SRT_BODY
        assert fake_sleep.calls == [1.0]
        paths = [r.url.path for r in service.requests]
        assert paths == [
            "/upload/v1beta/files",
            "/v1beta/files/abc123",
            "/v1beta/files/abc123",
            "/v1beta/models/gemini-2.5-pro:generateContent",
        ]

        body = json.loads(service.requests[-1].content)
        parts = body["contents"][0]["parts"]
        assert parts[0]["fileData"]["mimeType"] == "audio/wav"
        assert "SRT" in parts[1]["text"]

    def test_poll_timeout_propagates(self, media_file: Path, remote_file_json, fake_sleep) -> None:
        service = FakeGeminiService(remote_file_json, ["PROCESSING"] * 30, "unused")
        client = GeminiClient(
            api_key="test-key",
            transport=httpx.MockTransport(service),
            sleep=fake_sleep,
        )

        with client, pytest.raises(PollTimeoutError):
            transcribe_media(media_file, client, PromptTemplateManager())

        assert not any(r.url.path.endswith(":generateContent") for r in service.requests)

    def test_missing_media_file(self, tmp_path: Path) -> None:
        client = MagicMock()
        with pytest.raises(MediaNotFoundError):
            transcribe_media(tmp_path / "missing.mp4", client, MagicMock())
        client.upload_file.assert_not_called()

    def test_literal_prompt_skips_templates(self, media_file: Path, remote_file_json) -> None:
        remote = RemoteFile.model_validate(remote_file_json(state="ACTIVE"))
        client = _make_mock_client(remote, "plain transcript")
        tm = MagicMock()

        result = transcribe_media(media_file, client, tm, prompt="Just transcribe it.")

        assert result == "plain transcript"
        tm.render_transcription_prompt.assert_not_called()
        client.generate_from_file.assert_called_once_with(
            remote, "Just transcribe it.", model="gemini-2.5-pro"
        )

    def test_mime_type_from_extension(self, tmp_path: Path, remote_file_json) -> None:
        video = tmp_path / "clip.MOV"
        video.write_bytes(b"\x00\x00")
        remote = RemoteFile.model_validate(remote_file_json(state="ACTIVE"))
        client = _make_mock_client(remote, "text")

        transcribe_media(video, client, MagicMock(), prompt="p")

        client.upload_file.assert_called_once_with(video, "video/quicktime")

    def test_options_reach_template(self, media_file: Path, remote_file_json) -> None:
        remote = RemoteFile.model_validate(remote_file_json(state="ACTIVE"))
        client = _make_mock_client(remote, "```srt\nx\n```")
        tm = MagicMock()
        tm.render_transcription_prompt.return_value = "rendered"
        options = TranscriptionOptions(max_chars_per_caption=32, speaker_labels=False)

        result = transcribe_media(
            media_file, client, tm, model="gemini-2.5-flash", options=options
        )

        assert result == "x"
        tm.render_transcription_prompt.assert_called_once_with(
            "gemini-2.5-flash",
            max_chars_per_caption=32,
            speaker_labels=False,
            remove_filler_words=True,
            duration_seconds=None,
        )

    def test_console_output(self, media_file: Path, remote_file_json) -> None:
        remote = RemoteFile.model_validate(remote_file_json(state="ACTIVE"))
        client = _make_mock_client(remote, "text")
        console = MagicMock()

        transcribe_media(media_file, client, MagicMock(), prompt="p", console=console)

        assert console.print.call_count == 3


class TestTranscriptionOptions:
    def test_from_config(self) -> None:
        config = GemscribeConfig(max_chars_per_caption=30, remove_filler_words=False)
        options = TranscriptionOptions.from_config(config, duration_seconds=90.0)
        assert options.max_chars_per_caption == 30
        assert options.remove_filler_words is False
        assert options.duration_seconds == 90.0

    def test_rejects_non_positive_caption_length(self) -> None:
        with pytest.raises(ValueError):
            TranscriptionOptions(max_chars_per_caption=0)
