"""
gemscribe.llm.templates - Prompt template loading and rendering.

Uses Jinja2 to load and render the instruction templates shipped in
gemscribe/prompts/, or a user-supplied prompts directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, Template

from gemscribe.config import KNOWN_MODELS
from gemscribe.utils import format_duration

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

BASIC_TRANSCRIPT_TEMPLATE = "transcript_basic.txt"
SRT_TRANSCRIPT_TEMPLATE = "transcript_srt.txt"
TOPIC_TEMPLATE = "topic_analysis.txt"
DICTIONARY_TEMPLATE = "dictionary.txt"
REFINE_TEMPLATE = "refine_srt.txt"


def is_high_tier_model(model: str) -> bool:
    """Whether a model is capable enough for the full SRT instructions."""
    model_id = model.strip().removeprefix("models/")
    if model_id in KNOWN_MODELS:
        return KNOWN_MODELS[model_id]["tier"] == "pro"
    return "-pro" in model_id


def select_transcription_template(high_tier: bool) -> str:
    """Pick the transcription template for a model capability tier."""
    return SRT_TRANSCRIPT_TEMPLATE if high_tier else BASIC_TRANSCRIPT_TEMPLATE


class PromptTemplateManager:
    """Manages loading and rendering of prompt templates."""

    def __init__(self, prompts_dir: Path | None = None) -> None:
        self.prompts_dir = prompts_dir or PROMPTS_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.prompts_dir)),
            autoescape=False,
            keep_trailing_newline=False,
        )
        self._cache: dict[str, Template] = {}

    def get_template(self, name: str) -> Template:
        """Load a template by name.

        Args:
            name: Template filename (e.g., "dictionary.txt")

        Returns:
            Jinja2 Template object

        Raises:
            FileNotFoundError: If template doesn't exist
        """
        if name not in self._cache:
            template_path = self.prompts_dir / name
            if not template_path.exists():
                raise FileNotFoundError(f"Template not found: {template_path}")
            self._cache[name] = self.env.get_template(name)
        return self._cache[name]

    def render(self, template_name: str, variables: dict[str, Any]) -> str:
        """Render a template with variables."""
        template = self.get_template(template_name)
        return template.render(**variables)

    def list_templates(self) -> list[str]:
        """List available templates."""
        if not self.prompts_dir.exists():
            return []
        return sorted(f.name for f in self.prompts_dir.glob("*.txt"))

    def render_transcription_prompt(
        self,
        model: str,
        max_chars_per_caption: int = 20,
        speaker_labels: bool = True,
        remove_filler_words: bool = True,
        duration_seconds: float | None = None,
    ) -> str:
        """Render the transcription instructions for a model.

        Lighter models get a plain transcript request; higher-tier models
        get the full SRT instructions.
        """
        template_name = select_transcription_template(is_high_tier_model(model))
        return self.render(
            template_name,
            {
                "MAX_CHARS": max_chars_per_caption,
                "SPEAKER_LABELS": speaker_labels,
                "REMOVE_FILLERS": remove_filler_words,
                "DURATION": format_duration(duration_seconds) if duration_seconds else None,
            },
        )

    def render_topic_prompt(self, transcript: str) -> str:
        return self.render(TOPIC_TEMPLATE, {"TRANSCRIPT": transcript})

    def render_dictionary_prompt(self, topic: str) -> str:
        return self.render(DICTIONARY_TEMPLATE, {"TOPIC": topic})

    def render_refine_prompt(
        self,
        transcript: str,
        dictionary: str,
        max_chars_per_caption: int = 20,
        speaker_labels: bool = True,
        remove_filler_words: bool = True,
        duration_seconds: float | None = None,
    ) -> str:
        return self.render(
            REFINE_TEMPLATE,
            {
                "TRANSCRIPT": transcript,
                "DICTIONARY": dictionary,
                "MAX_CHARS": max_chars_per_caption,
                "SPEAKER_LABELS": speaker_labels,
                "REMOVE_FILLERS": remove_filler_words,
                "DURATION": format_duration(duration_seconds) if duration_seconds else None,
            },
        )
