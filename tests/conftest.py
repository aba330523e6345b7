"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from gemscribe.config import GemscribeConfig


def make_remote_file(
    state: str = "ACTIVE",
    name: str = "files/abc123",
    mime_type: str = "audio/wav",
) -> dict[str, Any]:
    """Build a file descriptor as the Files API returns it."""
    return {
        "name": name,
        "displayName": "interview.wav",
        "mimeType": mime_type,
        "sizeBytes": "1024",
        "createTime": "2026-02-15T12:00:00.000000Z",
        "updateTime": "2026-02-15T12:00:01.000000Z",
        "expirationTime": "2026-02-17T12:00:00.000000Z",
        "sha256Hash": "ZmFrZWhhc2g=",
        "uri": f"https://generativelanguage.googleapis.com/v1beta/{name}",
        "state": state,
        "source": "UPLOADED",
    }


def make_generation_response(
    text: str | None = "Hello",
    grounding: dict[str, Any] | None = None,
    usage: dict[str, int] | None = None,
) -> dict[str, Any]:
    """Build a generateContent response body with a single candidate."""
    parts = [{"text": text}] if text is not None else []
    candidate: dict[str, Any] = {
        "content": {"parts": parts, "role": "model"},
        "finishReason": "STOP",
        "index": 0,
    }
    if grounding is not None:
        candidate["groundingMetadata"] = grounding
    body: dict[str, Any] = {"candidates": [candidate]}
    if usage is not None:
        body["usageMetadata"] = usage
    return body


class FakeSleep:
    """Records requested sleeps instead of blocking."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeCredentialStore:
    """In-memory CredentialStore."""

    def __init__(self, secret: str = "") -> None:
        self.secret = secret

    def get(self) -> str:
        return self.secret

    def set(self, secret: str) -> None:
        self.secret = secret

    def delete(self) -> None:
        self.secret = ""


@pytest.fixture
def remote_file_json() -> Callable[..., dict[str, Any]]:
    return make_remote_file


@pytest.fixture
def generation_response() -> Callable[..., dict[str, Any]]:
    return make_generation_response


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def credential_store() -> FakeCredentialStore:
    return FakeCredentialStore("test-api-key")


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    """A small stand-in media file."""
    path = tmp_path / "interview.wav"
    path.write_bytes(b"RIFF\x00\x00\x00\x00WAVEfmt ")
    return path


@pytest.fixture
def config(tmp_path: Path) -> GemscribeConfig:
    return GemscribeConfig(output_dir=tmp_path / "out")


@pytest.fixture
def sample_srt() -> str:
    return (
        "1\n"
        "00:00:00,000 --> 00:00:02,500\n"
        "Hello, world.\n"
        "\n"
        "2\n"
        "00:00:02,600 --> 00:00:05,000\n"
        "Aoi: Welcome to the show.\n"
    )
