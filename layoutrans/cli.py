"""
Command-line interface for layoutrans.

Provides commands for:
- Translating PDFs in place, keeping their layout
- Inspecting the positioned tokens of a PDF
- Managing translation service API keys

Usage:
    layoutrans translate paper.pdf --target JA
    layoutrans extract paper.pdf --json
    layoutrans keys set deepl
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from layoutrans import __version__
from layoutrans.config import DEFAULT_BATCH_SIZE, DEFAULT_FONT, DEFAULT_OUTPUT_NAME, DEFAULT_TARGET_LANG
from layoutrans.errors import LayoutransError
from layoutrans.ingest.pdf import extract_tokens
from layoutrans.keys import SERVICES, KeyManager, require_key
from layoutrans.models import CoverPolicy
from layoutrans.pipeline import PipelineConfig, TranslationPipeline
from layoutrans.render.pdf import RenderConfig
from layoutrans.translate.base import create_translator

app = typer.Typer(
    name="layoutrans",
    help="layoutrans: translate PDFs in place while keeping their layout",
    add_completion=False,
)
console = Console()


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def version_callback(value: bool):
    if value:
        console.print(f"layoutrans v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """layoutrans: layout-preserving PDF translation."""
    pass


def _read_pdf(path: Path) -> bytes:
    if not path.exists():
        console.print(f"[red]Error:[/] File not found: {path}")
        raise typer.Exit(1)
    return path.read_bytes()


@app.command()
def translate(
    input_file: Path = typer.Argument(..., help="Input PDF"),
    output_file: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help=f"Output PDF (default: {DEFAULT_OUTPUT_NAME} next to the input)",
    ),
    target_lang: str = typer.Option(
        DEFAULT_TARGET_LANG, "--target", "-l",
        help="Target language code",
    ),
    source_lang: Optional[str] = typer.Option(
        None, "--source", "-s",
        help="Source language code (auto-detected when omitted)",
    ),
    backend: str = typer.Option(
        "deepl", "--backend", "-b",
        help="Translation backend (deepl, dummy)",
    ),
    api_key: Optional[str] = typer.Option(
        None, "--api-key",
        help="API key (default: looked up via `layoutrans keys`)",
    ),
    batch_size: int = typer.Option(
        DEFAULT_BATCH_SIZE, "--batch-size",
        min=1,
        help="Maximum tokens per translation call",
    ),
    cover_policy: CoverPolicy = typer.Option(
        CoverPolicy.LARGEST, "--cover-policy",
        help="How replacement text is fitted over the original",
    ),
    font: str = typer.Option(
        DEFAULT_FONT, "--font",
        help="Built-in PyMuPDF font used for replacement text",
    ),
    font_file: Optional[Path] = typer.Option(
        None, "--font-file",
        help="Font file used instead of --font",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
):
    """Translate a PDF, replacing every text run in place."""
    setup_logging(verbose)
    document = _read_pdf(input_file)
    output_file = output_file or input_file.with_name(DEFAULT_OUTPUT_NAME)

    translator_kwargs: dict = {}
    if backend.lower() == "deepl":
        try:
            key = api_key or require_key("deepl", KeyManager())
        except ValueError as e:
            console.print(f"[red]Error:[/] {e} (or pass --api-key)")
            raise typer.Exit(1)
        translator_kwargs = {"api_key": key, "source_lang": source_lang}

    config = PipelineConfig(
        target_lang=target_lang,
        translator_backend=backend,
        translator_kwargs=translator_kwargs,
        batch_size=batch_size,
        render=RenderConfig(
            font_name=font,
            font_file=str(font_file) if font_file else None,
            cover_policy=cover_policy,
        ),
    )

    try:
        translator = create_translator(backend, **translator_kwargs)
    except (ValueError, LayoutransError) as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Translating...", total=100)

        def update_progress(msg: str, pct: float):
            progress.update(task, description=msg, completed=int(pct * 100))

        pipeline = TranslationPipeline(config, translator=translator, progress_callback=update_progress)
        try:
            result = pipeline.run(document)
        except LayoutransError as e:
            progress.stop()
            console.print(f"[red]Translation failed during {e.phase}:[/] {e}")
            raise typer.Exit(1)

    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_bytes(result.document)

    table = Table(title="Translation Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for key, value in result.stats.items():
        table.add_row(key.replace("_", " ").title(), str(value))
    console.print(table)
    console.print(f"\n[green]Saved PDF to:[/] {output_file}")


@app.command()
def extract(
    input_file: Path = typer.Argument(..., help="Input PDF"),
    as_json: bool = typer.Option(False, "--json", help="Print tokens as JSON"),
    limit: int = typer.Option(0, "--limit", "-n", help="Show at most N tokens (0 = all)"),
):
    """Show the positioned text tokens of a PDF."""
    document = _read_pdf(input_file)
    try:
        tokens = extract_tokens(document)
    except LayoutransError as e:
        console.print(f"[red]Extraction failed:[/] {e}")
        raise typer.Exit(1)

    shown = tokens[:limit] if limit > 0 else tokens

    if as_json:
        typer.echo(json.dumps([t.to_dict() for t in shown], ensure_ascii=False, indent=2))
        return

    table = Table(title=f"{input_file.name}: {len(tokens)} tokens")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Page", justify="right")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Height", justify="right")
    table.add_column("Text", style="cyan")
    for i, token in enumerate(shown):
        table.add_row(
            str(i),
            str(token.page_index),
            f"{token.origin_x:.1f}",
            f"{token.origin_y:.1f}",
            f"{token.font_height:.1f}",
            repr(token.text),
        )
    console.print(table)


@app.command()
def keys(
    action: str = typer.Argument(..., help="Action: list, set, delete"),
    service: Optional[str] = typer.Argument(None, help="Service name (deepl)"),
):
    """Manage API keys.

    Examples:
        layoutrans keys list
        layoutrans keys set deepl
        layoutrans keys delete deepl
    """
    km = KeyManager()

    if action == "list":
        table = Table(title="API Keys Status")
        table.add_column("Service", style="cyan")
        table.add_column("Status", style="green")
        table.add_column("Source", style="yellow")
        table.add_column("Value", style="dim")
        for info in km.list_keys():
            status = "[green]✓ Set[/]" if info.is_set else "[red]✗ Not set[/]"
            table.add_row(info.service, status, info.source, info.masked_value or "-")
        console.print(table)
        console.print("\n[dim]Priority: env > keychain > config file[/]")
        return

    if action not in ("set", "delete"):
        console.print(f"[red]Error:[/] Unknown action: {action}")
        raise typer.Exit(1)

    if not service:
        console.print("[red]Error:[/] Service name required")
        console.print(f"Available services: {', '.join(SERVICES)}")
        raise typer.Exit(1)

    if action == "set":
        key = typer.prompt(f"Enter API key for {service}", hide_input=True)
        if not key.strip():
            console.print("[red]Error:[/] Key cannot be empty")
            raise typer.Exit(1)
        storage = km.set_key(service, key.strip())
        console.print(f"[green]✓[/] API key for {service} saved to {storage}")
    else:
        if km.delete_key(service):
            console.print(f"[green]✓[/] API key for {service} deleted")
        else:
            console.print(f"[yellow]No stored key for {service}[/]")


if __name__ == "__main__":
    app()
