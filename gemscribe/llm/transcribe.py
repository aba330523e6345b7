"""
gemscribe.llm.transcribe - Media-to-subtitle transcription.

Uploads a media file, waits for server-side processing, asks the model for
a transcript or SRT, and strips the code fence from the answer.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from gemscribe.exceptions import MediaNotFoundError
from gemscribe.llm.parsing import extract_fenced_content, has_fenced_block
from gemscribe.media import guess_mime_type

logger = logging.getLogger(__name__)


class TranscriptionOptions(BaseModel):
    """Caller-tunable knobs for the built-in instruction templates."""

    max_chars_per_caption: int = Field(default=20, gt=0)
    speaker_labels: bool = True
    remove_filler_words: bool = True
    duration_seconds: float | None = Field(default=None, gt=0.0)

    @classmethod
    def from_config(
        cls, config: Any, duration_seconds: float | None = None
    ) -> TranscriptionOptions:
        return cls(
            max_chars_per_caption=config.max_chars_per_caption,
            speaker_labels=config.speaker_labels,
            remove_filler_words=config.remove_filler_words,
            duration_seconds=duration_seconds,
        )

    def template_variables(self) -> dict[str, Any]:
        return {
            "max_chars_per_caption": self.max_chars_per_caption,
            "speaker_labels": self.speaker_labels,
            "remove_filler_words": self.remove_filler_words,
            "duration_seconds": self.duration_seconds,
        }


def transcribe_media(
    media_path: Path,
    client: Any,
    template_manager: Any,
    model: str | None = None,
    prompt: str | None = None,
    options: TranscriptionOptions | None = None,
    console=None,
) -> str:
    """Transcribe a local audio/video file.

    Args:
        media_path: Local media file
        client: GeminiClient instance
        template_manager: PromptTemplateManager instance
        model: Model id (defaults to the client's model)
        prompt: Literal prompt; overrides the built-in templates
        options: Template options (ignored when prompt is given)
        console: Optional rich console for output

    Returns:
        Transcript or SRT text with any enclosing code fence removed

    Raises:
        MediaNotFoundError: If media_path doesn't exist
        UploadError: If the upload fails
        ProcessingError: If server-side processing fails
        PollTimeoutError: If processing doesn't finish in the poll budget
        GenerationError: If the generation request fails
        NoTextContentError: If the model returns no text
    """
    if not media_path.is_file():
        raise MediaNotFoundError(media_path)

    model = model or client.model
    options = options or TranscriptionOptions()
    mime_type = guess_mime_type(media_path)

    if console:
        console.print(f"[dim]  Uploading {media_path.name} ({mime_type})...[/dim]")
    remote_file = client.upload_file(media_path, mime_type)

    if console:
        console.print("[dim]  Waiting for server-side processing...[/dim]")
    active_file = client.wait_until_active(remote_file.name)

    if prompt is None:
        prompt = template_manager.render_transcription_prompt(
            model, **options.template_variables()
        )

    if console:
        console.print(f"[dim]  Generating with {model} ({len(prompt)} char prompt)...[/dim]")
    result = client.generate_from_file(active_file, prompt, model=model)

    if not has_fenced_block(result.text):
        logger.debug("Model output for %s had no complete code fence", media_path.name)

    return extract_fenced_content(result.text)
