"""
gemscribe.cli - Typer CLI entry point.

Provides all subcommands for the gemscribe pipeline.
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gemscribe import __version__
from gemscribe.config import (
    CONFIG_FILENAME,
    GemscribeConfig,
    create_default_config,
    load_config,
    write_config,
)
from gemscribe.credentials import CredentialStore, KeyringCredentialStore, resolve_api_key
from gemscribe.exceptions import GemscribeError
from gemscribe.io import load_artifact, save_artifact
from gemscribe.llm.client import GeminiClient, create_client_from_config
from gemscribe.llm.templates import PromptTemplateManager, is_high_tier_model
from gemscribe.logging import configure_logging
from gemscribe.utils import mask_secret

app = typer.Typer(
    name="gemscribe",
    help="Gemini-powered subtitle generation.\n\n"
    "Uploads audio/video to the Gemini API and turns the response into "
    "clean SRT subtitles, with optional dictionary-guided refinement.",
    add_completion=False,
)
key_app = typer.Typer(help="Manage the stored Gemini API key.", add_completion=False)
app.add_typer(key_app, name="key")

console = Console()


def get_credential_store() -> CredentialStore:
    return KeyringCredentialStore()


def _fail(error: Exception) -> NoReturn:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(1)


def _load_config() -> GemscribeConfig:
    try:
        return load_config()
    except GemscribeError as e:
        _fail(e)


def _make_client(config: GemscribeConfig) -> GeminiClient:
    api_key = resolve_api_key(get_credential_store())
    return create_client_from_config(config, api_key)


def _template_manager(config: GemscribeConfig) -> PromptTemplateManager:
    prompts_dir = config.prompts_dir.expanduser() if config.prompts_dir else None
    return PromptTemplateManager(prompts_dir)


def _emit_result(
    content: str,
    config: GemscribeConfig,
    base_name: str,
    suffix: str,
    output_dir: Path | None,
    save: bool,
) -> None:
    typer.echo(content)
    if save:
        path = save_artifact(output_dir or config.output_dir, base_name, content, suffix=suffix)
        console.print(f"\n[green]✓[/green] Saved to {path}")


def _print_token_usage(client: GeminiClient) -> None:
    usage = client.get_token_usage()
    if usage["total_tokens"] > 0:
        console.print(f"[dim]Token usage: {usage['total_tokens']:,} total[/dim]")


def version_callback(value: bool) -> None:
    if value:
        console.print(f"gemscribe {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """gemscribe - Gemini-powered subtitle generation."""
    configure_logging(verbose)


@app.command("init")
def init_config(
    path: str = typer.Option(".", "--path", "-d", help="Directory to write gemscribe.yaml in"),
) -> None:
    """Write a default gemscribe.yaml."""
    config_path = Path(path) / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[red]Error: '{config_path}' already exists[/red]")
        raise typer.Exit(1)

    write_config(create_default_config(), config_path)
    console.print(f"[green]✓[/green] Created {config_path}")
    console.print("\nNext steps:")
    console.print("  gemscribe key set")
    console.print("  gemscribe transcribe <media_file>")


# API key management


@key_app.command("set")
def key_set(
    api_key: str = typer.Option(
        ..., "--api-key", prompt="Gemini API key", hide_input=True, help="API key to store"
    ),
) -> None:
    """Store the API key in the system keyring."""
    try:
        get_credential_store().set(api_key)
    except GemscribeError as e:
        _fail(e)
    console.print("[green]✓[/green] API key stored")


@key_app.command("show")
def key_show() -> None:
    """Show the stored API key (masked)."""
    try:
        api_key = get_credential_store().get()
    except GemscribeError as e:
        _fail(e)

    if not api_key:
        console.print("[yellow]No API key configured[/yellow]")
        return
    console.print(mask_secret(api_key))


@key_app.command("delete")
def key_delete() -> None:
    """Delete the stored API key."""
    try:
        get_credential_store().delete()
    except GemscribeError as e:
        _fail(e)
    console.print("[green]✓[/green] API key deleted")


# Transcription


@app.command("transcribe")
def transcribe(
    media_file: Path = typer.Argument(..., help="Audio or video file to transcribe"),
    model: str | None = typer.Option(None, "--model", "-m", help="Gemini model id"),
    prompt: str | None = typer.Option(
        None, "--prompt", "-p", help="Literal prompt (overrides built-in templates)"
    ),
    max_chars: int | None = typer.Option(
        None, "--max-chars", min=1, help="Maximum characters per subtitle"
    ),
    speaker_labels: bool | None = typer.Option(
        None, "--speaker-labels/--no-speaker-labels", help="Prefix subtitles with speaker names"
    ),
    duration: float | None = typer.Option(
        None, "--duration", help="Media duration in seconds (probed with ffprobe if omitted)"
    ),
    output_dir: Path | None = typer.Option(None, "--output", "-o", help="Output directory"),
    save: bool = typer.Option(True, "--save/--no-save", help="Save the result to a file"),
) -> None:
    """Transcribe a media file into subtitles."""
    from gemscribe.llm.transcribe import TranscriptionOptions, transcribe_media
    from gemscribe.media import probe_duration
    from gemscribe.srt import validate_srt

    config = _load_config()
    model = model or config.model

    if not media_file.is_file():
        console.print(f"[red]Error: Media file not found: {media_file}[/red]")
        raise typer.Exit(1)

    if duration is not None and duration <= 0:
        console.print("[red]Error: --duration must be positive[/red]")
        raise typer.Exit(1)
    if duration is None and prompt is None:
        duration = probe_duration(media_file)

    options = TranscriptionOptions.from_config(config, duration_seconds=duration)
    if max_chars is not None:
        options.max_chars_per_caption = max_chars
    if speaker_labels is not None:
        options.speaker_labels = speaker_labels

    console.print(f"[cyan]Transcribing {media_file.name} with {model}...[/cyan]\n")

    try:
        with _make_client(config) as client:
            result = transcribe_media(
                media_path=media_file,
                client=client,
                template_manager=_template_manager(config),
                model=model,
                prompt=prompt,
                options=options,
                console=console,
            )
            _print_token_usage(client)
    except GemscribeError as e:
        _fail(e)

    srt_mode = prompt is None and is_high_tier_model(model)
    if srt_mode:
        validation = validate_srt(result)
        if not validation.is_valid:
            console.print("[yellow]⚠ SRT validation warnings:[/yellow]")
            for error in validation.errors:
                console.print(f"[yellow]  - {error}[/yellow]")

    _emit_result(
        result,
        config,
        f"{media_file.stem}_subtitles",
        "srt" if srt_mode else "txt",
        output_dir,
        save,
    )


@app.command("analyze-topic")
def analyze_topic_cmd(
    transcript_file: Path = typer.Argument(..., help="Transcript or SRT file"),
    model: str | None = typer.Option(None, "--model", "-m", help="Gemini model id"),
    output_dir: Path | None = typer.Option(None, "--output", "-o", help="Output directory"),
    save: bool = typer.Option(False, "--save/--no-save", help="Save the result to a file"),
) -> None:
    """Summarize the topic and recurring terms of a transcript."""
    from gemscribe.llm.dictionary import analyze_topic

    config = _load_config()

    try:
        transcript = load_artifact(transcript_file)
    except OSError as e:
        _fail(e)

    try:
        with _make_client(config) as client:
            topic = analyze_topic(
                transcript,
                client=client,
                template_manager=_template_manager(config),
                model=model,
                console=console,
            )
            _print_token_usage(client)
    except GemscribeError as e:
        _fail(e)

    _emit_result(topic, config, f"{transcript_file.stem}_topic", "txt", output_dir, save)


@app.command("build-dictionary")
def build_dictionary_cmd(
    topic: str = typer.Argument(..., help="Topic text, or a file path with --from-file"),
    from_file: bool = typer.Option(False, "--from-file", "-f", help="Read the topic from a file"),
    model: str | None = typer.Option(None, "--model", "-m", help="Gemini model id"),
    search: bool | None = typer.Option(
        None, "--search/--no-search", help="Ground the dictionary with Google Search"
    ),
    output_dir: Path | None = typer.Option(None, "--output", "-o", help="Output directory"),
    save: bool = typer.Option(False, "--save/--no-save", help="Save the result to a file"),
) -> None:
    """Build a spelling dictionary of domain terms for a topic."""
    from gemscribe.llm.dictionary import build_dictionary

    config = _load_config()
    base_name = "dictionary"

    if from_file:
        topic_path = Path(topic)
        try:
            topic = load_artifact(topic_path)
        except OSError as e:
            _fail(e)
        base_name = f"{topic_path.stem}_dictionary"

    if search is None:
        search = config.dictionary_search

    try:
        with _make_client(config) as client:
            result = build_dictionary(
                topic,
                client=client,
                template_manager=_template_manager(config),
                model=model,
                search=search,
                console=console,
            )
            _print_token_usage(client)
    except GemscribeError as e:
        _fail(e)

    if result.sources:
        table = Table(title="Search Sources")
        table.add_column("Title", style="cyan")
        table.add_column("URI", style="dim")
        for source in result.sources:
            table.add_row(source.title or "-", source.uri or "-")
        console.print(table)

    _emit_result(result.text, config, base_name, "txt", output_dir, save)


@app.command("refine")
def refine_cmd(
    transcript_file: Path = typer.Argument(..., help="Initial transcript or SRT file"),
    dictionary_file: Path = typer.Argument(..., help="Dictionary file"),
    model: str | None = typer.Option(None, "--model", "-m", help="Gemini model id"),
    max_chars: int | None = typer.Option(
        None, "--max-chars", min=1, help="Maximum characters per subtitle"
    ),
    speaker_labels: bool | None = typer.Option(
        None, "--speaker-labels/--no-speaker-labels", help="Prefix subtitles with speaker names"
    ),
    output_dir: Path | None = typer.Option(None, "--output", "-o", help="Output directory"),
    save: bool = typer.Option(True, "--save/--no-save", help="Save the result to a file"),
) -> None:
    """Refine a transcript into SRT using a term dictionary."""
    from gemscribe.llm.dictionary import refine_with_dictionary
    from gemscribe.llm.transcribe import TranscriptionOptions

    config = _load_config()

    try:
        transcript = load_artifact(transcript_file)
        dictionary = load_artifact(dictionary_file)
    except OSError as e:
        _fail(e)

    options = TranscriptionOptions.from_config(config)
    if max_chars is not None:
        options.max_chars_per_caption = max_chars
    if speaker_labels is not None:
        options.speaker_labels = speaker_labels

    try:
        with _make_client(config) as client:
            result = refine_with_dictionary(
                transcript,
                dictionary,
                client=client,
                template_manager=_template_manager(config),
                model=model,
                options=options,
                console=console,
            )
            _print_token_usage(client)
    except GemscribeError as e:
        _fail(e)

    _emit_result(result, config, f"{transcript_file.stem}_refined", "srt", output_dir, save)


@app.command("validate")
def validate_cmd(
    srt_file: Path = typer.Argument(..., help="SRT file to validate"),
) -> None:
    """Check an SRT file's numbering and timing."""
    from gemscribe.srt import parse_srt, validate_srt

    try:
        content = load_artifact(srt_file)
    except OSError as e:
        _fail(e)

    validation = validate_srt(content)
    count = len(parse_srt(content))

    if validation.is_valid:
        console.print(f"[green]✓[/green] {srt_file.name}: {count} subtitles, valid")
        return

    table = Table(title=f"Validation Errors ({srt_file.name})")
    table.add_column("#", style="dim")
    table.add_column("Error", style="red")
    for i, error in enumerate(validation.errors, start=1):
        table.add_row(str(i), error)
    console.print(table)
    raise typer.Exit(1)


if __name__ == "__main__":
    app()
