#!/usr/bin/env python3
"""Command-line interface for artifact-lanes."""

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import DEFAULT_OPENAI_CONFIG
from .etl.classify import build_oracle
from .etl.features import FeatureExtractor
from .etl.normalize import NormalizeRun
from .etl.promote import promote as promote_artifacts
from .parsers.snippets import write_drafts
from .schema import LANES
from .validation.validator import validate_directory

app = typer.Typer(help="Artifact Lanes - classify, normalize and validate atomic notes")
console = Console()
log_console = Console(stderr=True)


@app.callback()
def setup(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=log_console, show_path=False)],
    )


def _require_dir(path: Path, label: str) -> None:
    if not path.is_dir():
        console.print(f"[red]{label} not found:[/red] {path}")
        raise typer.Exit(1)


@app.command()
def normalize(
    input_dir: Path = typer.Argument(
        Path("artifacts/drafts"), help="Directory containing draft markdown files"
    ),
    out: Path = typer.Option(
        Path("artifacts/normalized"), "--out", "-o", help="Output directory"
    ),
    max_count: int = typer.Option(50, "--max", "-m", help="Maximum drafts to process"),
    lane: str = typer.Option(None, "--lane", "-l", help="Force every artifact into this lane"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Skip remote calls and use the local heuristic"
    ),
):
    """Normalize draft artifacts into schema-conformant records."""
    _require_dir(input_dir, "Input dir")

    if lane is not None and lane not in LANES:
        console.print(f"[red]Unknown lane:[/red] {lane} (choose from {', '.join(LANES)})")
        raise typer.Exit(1)

    if not dry_run and not DEFAULT_OPENAI_CONFIG.enabled:
        console.print("[yellow]OPENAI_API_KEY not set, using local heuristic[/yellow]")

    run = NormalizeRun(oracle=build_oracle(dry_run=dry_run), lane_override=lane)
    summary = run.run(input_dir, out, max_count=max_count)

    if summary.processed == 0:
        console.print("No draft markdown files found.")
        return

    for path in summary.written:
        console.print(f"[green]✓[/green] {path}")

    console.print(f"\n[bold green]✓ Normalized {len(summary.written)} artifact(s)[/bold green]")
    if summary.duplicates:
        console.print(f"[yellow]Skipped {len(summary.duplicates)} duplicate(s)[/yellow]")
    if summary.rejected:
        console.print(f"[red]Rejected {len(summary.rejected)} invalid artifact(s):[/red]")
        for name, errors in summary.rejected.items():
            console.print(f"  {name}: {'; '.join(errors)}")


@app.command()
def validate(
    target_dir: Path = typer.Argument(
        Path("artifacts/normalized"), help="Directory of artifact markdown files"
    ),
    strict: bool = typer.Option(False, "--strict", help="Also enforce the maximum body length"),
    output_format: str = typer.Option("human", "--format", "-f", help="Report format: human|json"),
):
    """Validate artifact files against the schema."""
    _require_dir(target_dir, "Directory")

    report = validate_directory(target_dir, strict=strict)

    if output_format == "json":
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        for line in report.to_lines():
            console.print(line, markup=False, highlight=False, soft_wrap=True)

    raise typer.Exit(report.exit_code)


@app.command()
def features(
    input_dir: Path = typer.Argument(
        Path("artifacts/normalized"), help="Directory of normalized artifacts"
    ),
    out: Path = typer.Option(Path("artifacts/features"), "--out", "-o", help="Output directory"),
    max_count: int = typer.Option(20, "--max", "-m", help="Maximum artifacts to process"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use local fallback features only"),
):
    """Extract semantic features (key phrases, lane probabilities, embedding)."""
    _require_dir(input_dir, "Input dir")

    written = FeatureExtractor(dry_run=dry_run).run(input_dir, out, max_count=max_count)

    if not written:
        console.print("No input markdown found.")
        return

    for path in written:
        console.print(f"[green]✓[/green] {path}")
    console.print(f"\n[bold green]✓ Extracted features for {len(written)} file(s)[/bold green]")


@app.command()
def promote(
    src_dir: Path = typer.Argument(
        Path("artifacts/normalized"), help="Directory of normalized artifacts"
    ),
    dest: Path = typer.Option(Path("artifacts/lanes"), "--dest", "-d", help="Lane folder root"),
    max_count: int = typer.Option(100, "--max", "-m", help="Maximum files to promote"),
    move: bool = typer.Option(False, "--move", help="Move files instead of copying"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would happen"),
):
    """Promote normalized artifacts into lane folders."""
    _require_dir(src_dir, "Source dir")

    promotions = promote_artifacts(src_dir, dest, max_count=max_count, move=move, dry_run=dry_run)

    if not promotions:
        console.print("No normalized files found.")
        return

    table = Table(title="Dry run" if dry_run else ("Moved" if move else "Copied"))
    table.add_column("Source", style="cyan")
    table.add_column("Destination", style="green")
    for p in promotions:
        table.add_row(p.source.name, str(p.destination))
    console.print(table)

    console.print(f"\n[bold green]✓ Promoted {len(promotions)} file(s)[/bold green]")


@app.command()
def extract_snippets(
    chatlog: Path = typer.Argument(..., help="Chat log text file", exists=True, dir_okay=False),
    out: Path = typer.Option(Path("artifacts/drafts"), "--out", "-o", help="Drafts directory"),
):
    """Extract candidate snippets from a chat log as draft artifacts."""
    written = write_drafts(chatlog, out)
    console.print(f"[bold green]✓ Extracted {len(written)} draft(s) to[/bold green] {out}")


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
