"""CLI for izi-lab: analyze documents and print copy-ready summaries."""

from __future__ import annotations

import asyncio
import mimetypes
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from izi_lab.core.config import AppSettings
from izi_lab.domains.lab.categories import CATEGORY_ORDER, SYSTEM_CATEGORIES
from izi_lab.domains.lab.models import AnalysisPreferences, CustomAbbreviation, ExamRecord
from izi_lab.exceptions import IziLabError
from izi_lab.formatters.json_formatter import JSONFormatter
from izi_lab.formatting.summary import SummaryFormatter
from izi_lab.hooks import setup_logging
from izi_lab.ingestion.validation import validate_upload
from izi_lab.models import AudioBlob, InputSource, UploadedFile
from izi_lab.prompts import available_prompts, configure_from_path
from izi_lab.services.analysis_service import AnalysisService
from izi_lab.session.merge import ExamSession

app = typer.Typer(name="izi-lab", help="Medical documents to de-identified lab summaries")
console = Console()
err_console = Console(stderr=True)


def _build_settings(api_key: Optional[str], model: Optional[str], verbose: bool) -> AppSettings:
    """Build settings, overriding env defaults with CLI flags."""
    settings = AppSettings()
    llm_overrides: dict = {}
    if api_key:
        llm_overrides["api_key"] = api_key
    if model:
        llm_overrides["model"] = model
    if llm_overrides:
        settings.llm = settings.llm.model_copy(update=llm_overrides)
    if verbose:
        settings.observability = settings.observability.model_copy(update={"log_level": "DEBUG"})
    return settings


def _parse_abbrev(values: list[str]) -> list[CustomAbbreviation]:
    parsed: list[CustomAbbreviation] = []
    for index, raw in enumerate(values):
        exam_name, sep, abbreviation = raw.partition("=")
        if not sep or not exam_name.strip() or not abbreviation.strip():
            raise typer.BadParameter(f"Expected 'Exam=Abbr', got {raw!r}", param_hint="--abbrev")
        parsed.append(
            CustomAbbreviation(id=f"cli-{index}", exam_name=exam_name.strip(), abbreviation=abbreviation.strip())
        )
    return parsed


def _load_files(paths: list[Path], settings: AppSettings) -> list[UploadedFile]:
    uploads: list[UploadedFile] = []
    for path in paths:
        mime_type = mimetypes.guess_type(path.name)[0] or ""
        size = path.stat().st_size
        validate_upload(mime_type, size, settings.ingestion, filename=path.name)
        uploads.append(UploadedFile(content=path, mime_type=mime_type, filename=path.name, size=size))
    return uploads


def _print_record(record: ExamRecord, formatter: SummaryFormatter) -> None:
    console.print(Panel(formatter.clipboard_text(record), title=record.category.value, expand=False))
    abnormal = formatter.abnormal_clipboard_text(record)
    if abnormal:
        console.print(f"[bold red]{abnormal}[/bold red]")
    if not record.has_content:
        console.print("[yellow]No data could be extracted for this record.[/yellow]")


@app.command()
def analyze(
    files: Optional[list[Path]] = typer.Argument(None, help="PDF or image files", exists=True, dir_okay=False),
    text: Optional[str] = typer.Option(None, "--text", help="Raw document text"),
    audio: Optional[Path] = typer.Option(None, "--audio", help="Recorded dictation", exists=True, dir_okay=False),
    refs: bool = typer.Option(False, "--refs", help="Include reference ranges"),
    group_dates: bool = typer.Option(False, "--group-dates", help="Group repeated analytes across dates"),
    abbrev: Optional[list[str]] = typer.Option(None, "--abbrev", help="Custom abbreviation 'Exam=Abbr'"),
    as_json: bool = typer.Option(False, "--json", help="Print the JSON export instead of summaries"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="LLM API key"),
    model: Optional[str] = typer.Option(None, "--model", help="LLM model name"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Analyze files, text or audio and print the summaries."""
    settings = _build_settings(api_key, model, verbose)
    setup_logging(settings.observability)
    try:
        configure_from_path(settings.prompts.overrides_path)
    except (OSError, ValueError) as exc:
        err_console.print(f"[red]Cannot load prompt overrides: {exc}[/red]")
        raise typer.Exit(code=2) from exc

    preferences = AnalysisPreferences(show_reference_values=refs, group_dates=group_dates)
    custom = _parse_abbrev(abbrev or [])

    session = ExamSession()
    try:
        if files:
            session.enqueue(_load_files(files, settings))
        if audio is not None:
            audio_mime = mimetypes.guess_type(audio.name)[0] or ""
            session.enqueue(AudioBlob(content=audio, mime_type=audio_mime))
        if text:
            session.enqueue(text)
    except IziLabError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2) from exc

    if not session.pending:
        raise typer.BadParameter("Provide at least one file, --text or --audio")

    service = AnalysisService(settings)

    async def _run() -> list[ExamRecord]:
        inputs: list[InputSource] = list(session.pending)
        err_console.print(f"[bold]Analyzing {len(inputs)} input(s) with {settings.llm.model}[/bold]")
        return await service.analyze(session, preferences=preferences, custom_abbreviations=custom)

    try:
        asyncio.run(_run())
    except IziLabError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    if as_json:
        sys.stdout.write(JSONFormatter().format(session.records, session_id=session.session_id).decode())
        sys.stdout.write("\n")
        return

    if session.is_empty:
        console.print("[yellow]No exams were found in the input.[/yellow]")
        return

    formatter = SummaryFormatter()
    for record in session.records:
        _print_record(record, formatter)
    console.print(f"\nTotal records: {len(session)}")


@app.command()
def categories() -> None:
    """List the physiological categories and their abbreviations."""
    table = Table(title="Physiological Categories")
    table.add_column("Category", style="cyan")
    table.add_column("Abbreviations", style="green")
    for category in CATEGORY_ORDER:
        abbrs = SYSTEM_CATEGORIES.get(category, ())
        table.add_row(category.value, ", ".join(abbrs) if abbrs else "(catch-all)")
    console.print(table)


@app.command()
def prompts(
    category: str = typer.Argument("extraction", help="Template group: extraction or ingestion"),
) -> None:
    """List the prompt fragments available for a template group."""
    names = available_prompts("lab", category)
    if not names:
        err_console.print(f"[red]No prompts for lab/{category}[/red]")
        raise typer.Exit(code=1)
    for name in names:
        console.print(name)


if __name__ == "__main__":
    app()
