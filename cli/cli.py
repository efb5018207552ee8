"""Autoreg CLI.

Developer CLI for running deload analysis on exported workout history,
inspecting the stored training state and serving the HTTP API locally.
"""

import os
from datetime import datetime
from pathlib import Path

import typer
import uvicorn
from loguru import logger
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from autoreg.analysis.deload import analyze_deload_need, get_deload_config
from autoreg.analysis.schemas import DeloadRecommendation, Severity
from autoreg.config.settings import settings
from autoreg.core.logger import configure_logging
from autoreg.session import build_session_from_settings
from autoreg.training.landmarks import TRACKED_MUSCLES, VOLUME_LANDMARKS
from autoreg.training.types import WorkoutFeedback, WorkoutRecord

# Initialize Rich console for output
console = Console()

# Initialize Typer app
app = typer.Typer(
    name="autoreg",
    help="Autoreg CLI - deload analysis and mesocycle inspection",
    add_completion=False,
)

DEFAULT_HOST = os.getenv("SERVER_HOST", "127.0.0.1")

SEVERITY_STYLES = {
    Severity.HIGH: "bold red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
}

_workouts_adapter = TypeAdapter(list[WorkoutRecord])
_feedback_adapter = TypeAdapter(list[WorkoutFeedback])


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level"),
) -> None:
    configure_logging(settings, component="cli", level=log_level)


def _load_json(path: Path, adapter: TypeAdapter):
    try:
        return adapter.validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        console.print(f"[bold red]✗ Could not load {path}:[/bold red] {e}")
        logger.exception(f"Failed to load {path}")
        raise typer.Exit(code=1) from e


def _print_recommendation(recommendation: DeloadRecommendation) -> None:
    verdict = "[bold red]Deload recommended[/bold red]" if recommendation.needs_deload else "[green]No deload needed[/green]"
    console.print(
        Panel(
            f"{verdict}\nConfidence: {recommendation.confidence}%\n{recommendation.summary}",
            title="Deload analysis",
        )
    )

    if recommendation.signals:
        table = Table(title="Signals")
        table.add_column("Signal")
        table.add_column("Severity")
        table.add_column("Points", justify="right")
        table.add_column("Description")
        for signal in recommendation.signals:
            style = SEVERITY_STYLES[signal.severity]
            table.add_row(signal.signal, f"[{style}]{signal.severity}[/{style}]", str(signal.points), signal.description)
        console.print(table)

    config = get_deload_config(recommendation)
    console.print(
        f"Volume x{config.volume_multiplier:.2f} | Intensity x{config.intensity_multiplier:.2f} | "
        f"Max sets {config.max_sets_per_exercise} | Remove finishers: {config.remove_finishers}"
    )


@app.command()
def analyze(
    workouts: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with workout history"),
    feedback: Path | None = typer.Option(None, "--feedback", "-f", exists=True, dir_okay=False, help="JSON file with feedback"),
    now: datetime | None = typer.Option(None, "--now", help="Reference time (ISO 8601), defaults to now"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw recommendation as JSON"),
) -> None:
    """Analyze exported workout history and print a deload recommendation."""
    history = _load_json(workouts, _workouts_adapter)
    feedback_history = _load_json(feedback, _feedback_adapter) if feedback else []
    logger.info(f"Analyzing {len(history)} workouts and {len(feedback_history)} feedback entries")

    recommendation = analyze_deload_need(history, feedback_history, now=now)
    if as_json:
        console.print_json(recommendation.model_dump_json())
        return
    _print_recommendation(recommendation)


@app.command()
def landmarks() -> None:
    """Print the weekly volume landmarks per muscle group."""
    table = Table(title="Volume landmarks (sets/week)")
    table.add_column("Muscle")
    for column in ("MV", "MEV", "MAV", "MRV"):
        table.add_column(column, justify="right")
    for muscle in TRACKED_MUSCLES:
        landmark = VOLUME_LANDMARKS[muscle]
        table.add_row(str(muscle), str(landmark.mv), str(landmark.mev), f"{landmark.mav[0]}-{landmark.mav[1]}", str(landmark.mrv))
    console.print(table)


@app.command()
def status() -> None:
    """Show the stored active mesocycle and this week's volume."""
    session = build_session_from_settings(settings)
    session.day_boundary_check()
    active = session.active_mesocycle
    if active is None:
        console.print("[yellow]No active mesocycle[/yellow]")
    else:
        console.print(
            f"[bold]{active.name}[/bold] - week {active.current_week}/{active.total_weeks}, "
            f"workouts {active.completed_workouts}/{active.total_workouts}"
        )

    table = Table(title="Weekly volume")
    table.add_column("Muscle")
    table.add_column("Sets", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("% MRV", justify="right")
    table.add_column("Status")
    for muscle in TRACKED_MUSCLES:
        report = session.volume_status(muscle)
        table.add_row(
            str(muscle),
            str(report.sets_completed),
            str(report.target_sets),
            f"{report.percent_of_mrv:.0f}",
            str(report.status),
        )
    console.print(table)

    overlay = session.overlay()
    if overlay.is_in_deload_week:
        console.print(f"[cyan]Deload week in progress since {overlay.deload_start_date:%Y-%m-%d}[/cyan]")
    if session.should_trigger_deload():
        console.print("[bold red]Fatigue indicates a deload is due[/bold red]")


@app.command()
def reset(
    confirm: bool = typer.Option(False, "--confirm", help="Confirm deletion (required for safety)"),
) -> None:
    """Delete all stored mesocycles, volume, fatigue, feedback and deload state.

    This cannot be undone.
    """
    if not confirm:
        console.print("[red]Error:[/red] --confirm flag is required for safety", style="bold red")
        console.print("Usage: reset --confirm")
        raise typer.Exit(1)

    session = build_session_from_settings(settings)
    session.reset()
    console.print("[green]✓ Training data reset[/green]")


@app.command()
def server(
    host: str = typer.Option(DEFAULT_HOST, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
) -> None:
    """Run the FastAPI server."""
    logger.info(f"Starting FastAPI server on {host}:{port} (reload={reload})")
    uvicorn.run("autoreg.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
