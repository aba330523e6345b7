"""Tests for gemscribe.llm.templates."""

from __future__ import annotations

from pathlib import Path

import pytest

from gemscribe.llm.templates import (
    BASIC_TRANSCRIPT_TEMPLATE,
    SRT_TRANSCRIPT_TEMPLATE,
    PromptTemplateManager,
    is_high_tier_model,
    select_transcription_template,
)


class TestModelTier:
    def test_pro_model_is_high_tier(self) -> None:
        assert is_high_tier_model("gemini-2.5-pro")

    def test_flash_model_is_not_high_tier(self) -> None:
        assert not is_high_tier_model("gemini-2.5-flash")

    def test_prefixed_model_id(self) -> None:
        assert is_high_tier_model("models/gemini-2.5-pro")

    def test_unknown_pro_model(self) -> None:
        assert is_high_tier_model("gemini-3.0-pro-preview")

    def test_unknown_model(self) -> None:
        assert not is_high_tier_model("gemini-experimental")

    def test_select_template(self) -> None:
        assert select_transcription_template(True) == SRT_TRANSCRIPT_TEMPLATE
        assert select_transcription_template(False) == BASIC_TRANSCRIPT_TEMPLATE


class TestPromptTemplateManager:
    def test_list_templates(self) -> None:
        tm = PromptTemplateManager()
        assert tm.list_templates() == [
            "dictionary.txt",
            "refine_srt.txt",
            "topic_analysis.txt",
            "transcript_basic.txt",
            "transcript_srt.txt",
        ]

    def test_missing_template(self, tmp_path: Path) -> None:
        tm = PromptTemplateManager(tmp_path)
        with pytest.raises(FileNotFoundError):
            tm.get_template("nope.txt")

    def test_custom_prompts_dir(self, tmp_path: Path) -> None:
        (tmp_path / "transcript_srt.txt").write_text("Custom {{ MAX_CHARS }}")
        tm = PromptTemplateManager(tmp_path)
        assert tm.render_transcription_prompt("gemini-2.5-pro", max_chars_per_caption=12) == (
            "Custom 12"
        )

    def test_template_cached(self) -> None:
        tm = PromptTemplateManager()
        assert tm.get_template("dictionary.txt") is tm.get_template("dictionary.txt")


class TestTranscriptionPrompt:
    def test_high_tier_gets_srt_instructions(self) -> None:
        prompt = PromptTemplateManager().render_transcription_prompt("gemini-2.5-pro")
        assert "SRT" in prompt
        assert "about **20 characters**" in prompt
        assert "```srt" in prompt

    def test_standard_tier_gets_basic_instructions(self) -> None:
        prompt = PromptTemplateManager().render_transcription_prompt("gemini-2.5-flash")
        assert "transcript" in prompt
        assert "```srt" not in prompt

    def test_caption_length(self) -> None:
        prompt = PromptTemplateManager().render_transcription_prompt(
            "gemini-2.5-pro", max_chars_per_caption=35
        )
        assert "about **35 characters**" in prompt

    def test_speaker_and_filler_toggles(self) -> None:
        tm = PromptTemplateManager()
        with_both = tm.render_transcription_prompt("gemini-2.5-pro")
        without = tm.render_transcription_prompt(
            "gemini-2.5-pro", speaker_labels=False, remove_filler_words=False
        )
        assert "Speakers" in with_both
        assert "Filler words" in with_both
        assert "Speakers" not in without
        assert "Filler words" not in without

    def test_duration(self) -> None:
        tm = PromptTemplateManager()
        assert "1:02:05" in tm.render_transcription_prompt("gemini-2.5-pro", duration_seconds=3725)
        assert "Recording length" not in tm.render_transcription_prompt("gemini-2.5-pro")


class TestTextPrompts:
    def test_topic_prompt_includes_transcript(self) -> None:
        prompt = PromptTemplateManager().render_topic_prompt("We discussed kubectl.")
        assert "We discussed kubectl." in prompt

    def test_dictionary_prompt_includes_topic(self) -> None:
        prompt = PromptTemplateManager().render_dictionary_prompt("Container orchestration")
        assert "Container orchestration" in prompt

    def test_refine_prompt(self) -> None:
        prompt = PromptTemplateManager().render_refine_prompt(
            "1\n00:00:00,000 --> 00:00:01,000\nkubernetis",
            "Kubernetes: kubernetis",
            max_chars_per_caption=25,
        )
        assert "Kubernetes: kubernetis" in prompt
        assert "00:00:00,000 --> 00:00:01,000" in prompt
        assert "about 25 characters" in prompt
