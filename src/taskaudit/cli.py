"""Command-line interface for taskaudit."""

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import structlog
import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from taskaudit.analysis import analyze as run_analysis
from taskaudit.analysis import filter_by_completion, summarize, top_cleanup_candidates
from taskaudit.extraction import MarkerScanner
from taskaudit.history import GitHistoryProvider, StalenessEnricher
from taskaudit.models import (
    TIER_ORDER,
    AnalysisConfig,
    BatchSummary,
    ConfidenceResult,
    RepositoryConfig,
    Settings,
    TaskMarker,
    Tier,
)

app = typer.Typer(
    name="taskaudit",
    help="Find TODO markers and checklist items that are probably already done",
    add_completion=False,
)
console = Console()

OUTPUT_FORMATS = ("summary", "json")

TIER_STYLES = {
    Tier.VERY_HIGH: "bold green",
    Tier.HIGH: "green",
    Tier.MEDIUM: "yellow",
    Tier.LOW: "blue",
    Tier.ACTIVE: "dim",
}


def _stderr_logger(*args) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger so redirected streams are honoured
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output to stderr through the console renderer.

    Args:
        level: Minimum log level name (DEBUG, INFO, WARNING, ...)

    Raises:
        ValueError: If the level name is unknown
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def _scan(repo_path: Path) -> List[TaskMarker]:
    scanner = MarkerScanner(RepositoryConfig(repo_path=repo_path))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Scanning for task markers...", total=None)
        markers = scanner.scan()
        progress.update(task, completed=True)

    return markers


def _build_enricher(repo_path: Path, config: AnalysisConfig) -> Optional[StalenessEnricher]:
    try:
        provider = GitHistoryProvider(repo_path)
    except ValueError as e:
        console.print(f"[yellow]Warning:[/yellow] Git history unavailable, skipping staleness ({e})")
        return None

    return StalenessEnricher.from_config(provider, config)


def _print_summary(summary: BatchSummary, results: List[ConfidenceResult], top: int) -> None:
    console.print("\n[bold]Completion Confidence[/bold]")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Tier", width=10)
    table.add_column("Markers", justify="right", style="cyan")
    table.add_column("Share", justify="right")

    for tier in TIER_ORDER:
        count = summary.tier_counts[tier]
        share = f"{100.0 * count / summary.total:.1f}%" if summary.total else "0.0%"
        table.add_row(f"[{TIER_STYLES[tier]}]{tier.value}[/{TIER_STYLES[tier]}]", str(count), share)

    console.print(table)
    console.print(f"[cyan]Total markers:[/cyan] {summary.total}")
    console.print(f"[cyan]Likely completed:[/cyan] {summary.likely_completed}")
    console.print(f"[cyan]Reduction potential:[/cyan] {summary.reduction_potential:.1f}%")

    candidates = top_cleanup_candidates(results, limit=top)
    if candidates:
        console.print("\n[bold]Top Cleanup Candidates[/bold]")
        files_table = Table(show_header=True, header_style="bold cyan")
        files_table.add_column("File", overflow="fold")
        files_table.add_column("Likely Done", justify="right", style="green")
        files_table.add_column("Avg Score", justify="right")

        for aggregate in candidates:
            files_table.add_row(
                aggregate.file_path,
                str(aggregate.likely_completed),
                f"{aggregate.average_score:.1f}",
            )

        console.print(files_table)


def _print_results(results: List[ConfidenceResult], limit: int) -> None:
    ranked = sorted(results, key=lambda r: (-r.score, r.marker.file_path, r.marker.line_number))[:limit]
    if not ranked:
        return

    console.print("\n[bold]Highest Scoring Markers[/bold]")
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Score", justify="right", width=6)
    table.add_column("Tier", width=10)
    table.add_column("Location", style="cyan", overflow="fold")
    table.add_column("Reasons", overflow="fold")

    for result in ranked:
        style = TIER_STYLES[result.tier]
        table.add_row(
            f"{result.score:.1f}",
            f"[{style}]{result.tier.value}[/{style}]",
            result.marker.location,
            "; ".join(result.reasons) or "[dim]none[/dim]",
        )

    console.print(table)


@app.command()
def scan(
    repo_path: Path = typer.Argument(..., help="Path to the repository"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSON file"),
) -> None:
    """List task markers found in a repository."""
    try:
        console.print(f"[bold green]Scanning:[/bold green] {repo_path}")
        markers = _scan(repo_path)

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Location", style="cyan", overflow="fold")
        table.add_column("Kind", style="green")
        table.add_column("Text", style="white", overflow="fold")

        for marker in markers:
            table.add_row(marker.location, marker.marker_kind.value, marker.text[:80])

        console.print(table)
        console.print(f"\n[bold green]✓[/bold green] Found {len(markers)} markers")

        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            with open(output, "w") as f:
                json.dump([m.model_dump(mode="json") for m in markers], f, indent=2)
            console.print(f"[bold green]✓[/bold green] Saved to {output}")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def analyze(
    repo_path: Path = typer.Argument(..., help="Path to the repository"),
    output_format: str = typer.Option("summary", "--format", "-f", help="Output format: summary or json"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSON file"),
    min_score: float = typer.Option(0.0, "--min-score", help="Only report markers scoring at least this"),
    current_phase: Optional[int] = typer.Option(None, "--current-phase", help="Current project phase"),
    use_git: bool = typer.Option(True, "--use-git/--no-git", help="Use Git history for staleness"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Markers analysed concurrently"),
    top: int = typer.Option(10, "--top", "-n", help="Number of files and markers to show"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (default from TASKAUDIT_LOG_LEVEL)"),
) -> None:
    """Score every task marker in a repository for completion confidence."""
    try:
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown format '{output_format}' (expected one of: {', '.join(OUTPUT_FORMATS)})")

        settings = Settings()
        configure_logging(log_level or settings.log_level)

        config = settings.to_analysis_config(
            current_phase=current_phase,
            max_workers=workers,
            root_path=repo_path,
        )
        enricher = _build_enricher(repo_path, config) if use_git else None

        if output_format == "summary":
            console.print(f"[bold green]Analyzing:[/bold green] {repo_path}")
        markers = _scan(repo_path)
        results = run_analysis(markers, config=config, enricher=enricher)
        summary = summarize(results)
        reported = filter_by_completion(results, include_completed=True, min_score=min_score)

        payload = {
            "summary": summary.model_dump(mode="json"),
            "results": [r.model_dump(mode="json") for r in reported],
        }

        if output_format == "json":
            if output is None:
                typer.echo(json.dumps(payload, indent=2))
        else:
            _print_summary(summary, results, top)
            _print_results(reported, top)

        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            with open(output, "w") as f:
                json.dump(payload, f, indent=2)
            console.print(f"[bold green]✓[/bold green] Saved to {output}")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from taskaudit import __version__

    console.print(f"[bold]taskaudit[/bold] version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
