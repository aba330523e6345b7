"""
gemscribe.llm.dictionary - Text-to-text refinement passes.

Three passes reuse the same "render prompt → generate → strip fence" shape:
- Topic analysis: recurring domain terms in a transcript
- Dictionary construction: standard spellings for a topic (optionally
  grounded with Google Search)
- Dictionary-guided refinement: re-render a transcript as SRT using the
  dictionary as a style guide
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from gemscribe.llm.models import GroundingSource
from gemscribe.llm.parsing import extract_fenced_content
from gemscribe.llm.transcribe import TranscriptionOptions

logger = logging.getLogger(__name__)


class DictionaryResult(BaseModel):
    """Dictionary text plus the search side channel, when present."""

    text: str
    search_snippet: str | None = None
    sources: list[GroundingSource] = []


def analyze_topic(
    transcript: str,
    client: Any,
    template_manager: Any,
    model: str | None = None,
    console=None,
) -> str:
    """Summarize the topic and recurring terms of a transcript.

    Args:
        transcript: Initial transcript or SRT text
        client: GeminiClient instance
        template_manager: PromptTemplateManager instance
        model: Model id (defaults to the client's model)
        console: Optional rich console for output

    Returns:
        Topic summary text
    """
    prompt = template_manager.render_topic_prompt(transcript)

    if console:
        console.print(f"[dim]  Sending topic prompt ({len(prompt)} chars)...[/dim]")

    result = client.generate_text(prompt, model=model)
    return extract_fenced_content(result.text)


def build_dictionary(
    topic: str,
    client: Any,
    template_manager: Any,
    model: str | None = None,
    search: bool = True,
    console=None,
) -> DictionaryResult:
    """Build a spelling dictionary of domain terms for a topic.

    Args:
        topic: Topic summary, usually from analyze_topic
        client: GeminiClient instance
        template_manager: PromptTemplateManager instance
        model: Model id (defaults to the client's model)
        search: Ground the dictionary with Google Search
        console: Optional rich console for output

    Returns:
        DictionaryResult with the dictionary text and any search snippet
    """
    prompt = template_manager.render_dictionary_prompt(topic)

    if console:
        mode = "with search" if search else "without search"
        console.print(f"[dim]  Sending dictionary prompt {mode} ({len(prompt)} chars)...[/dim]")

    result = client.generate_text(prompt, model=model, search=search)

    snippet = None
    sources: list[GroundingSource] = []
    if result.grounding is not None:
        snippet = result.grounding.rendered_content
        sources = result.grounding.sources
        logger.debug("Search entry point: %s", snippet)
        for source in sources:
            logger.debug("Grounding source: %s (%s)", source.title, source.uri)

    return DictionaryResult(
        text=extract_fenced_content(result.text),
        search_snippet=snippet,
        sources=sources,
    )


def refine_with_dictionary(
    transcript: str,
    dictionary: str,
    client: Any,
    template_manager: Any,
    model: str | None = None,
    options: TranscriptionOptions | None = None,
    console=None,
) -> str:
    """Re-render a transcript as SRT, standardizing terms with a dictionary.

    Args:
        transcript: Initial transcript or SRT text
        dictionary: Dictionary text, usually from build_dictionary
        client: GeminiClient instance
        template_manager: PromptTemplateManager instance
        model: Model id (defaults to the client's model)
        options: Subtitle formatting options
        console: Optional rich console for output

    Returns:
        Refined SRT text with any enclosing code fence removed
    """
    options = options or TranscriptionOptions()
    prompt = template_manager.render_refine_prompt(
        transcript, dictionary, **options.template_variables()
    )

    if console:
        console.print(f"[dim]  Sending refinement prompt ({len(prompt)} chars)...[/dim]")

    result = client.generate_text(prompt, model=model)
    return extract_fenced_content(result.text)
