"""
Typer CLI for the adaptive tutor.

Commands:
    tutor mastery PROGRESS.json             - Mastery per topic
    tutor next-topic PROGRESS.json CURR.json - Next topic recommendation
    tutor path PROGRESS.json CURR.json      - Phased learning path
    tutor gaps ASSESSMENTS.json             - Severity-ranked learning gaps
    tutor velocity PROGRESS.json            - Topics mastered per week
    tutor predict TOPIC PROGRESS.json       - Days until a topic is mastered
    tutor difficulty 1 1 0 1 1              - Next question difficulty
    tutor validate-curriculum CURR.json     - Check a prerequisite graph
    tutor db init                           - Initialize progress store tables
    tutor serve                             - Run the HTTP API

Progress files map topics to {"attempts": [{correct, total, timestamp}], "timeSpent"}
(optionally wrapped as {"student_id": ..., "progress": {...}}). Assessment
files hold a list of {"results": [{topic, isCorrect, ...}]} records.
"""

from __future__ import annotations

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer
from loguru import logger
from rich import box
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from config import get_settings
from src.adaptive import (
    calculate_learning_velocity,
    calculate_optimal_difficulty,
    generate_learning_path,
    get_available_topics,
    identify_learning_gaps,
    predict_time_to_mastery,
    summarize_gaps,
)
from src.core.mastery import format_progress_bar, topic_mastery
from src.core.models import (
    CurriculumGraph,
    MasteryStatus,
    StudentProgress,
    assessments_from_list,
    parse_timestamp,
    progress_from_dict,
)
from src.curriculum import CurriculumError, load_curriculum

app = typer.Typer(
    help="Adaptive tutor CLI: mastery, recommendations, learning paths and gap reports",
    no_args_is_help=True,
)

db_app = typer.Typer(help="Progress store management")
app.add_typer(db_app, name="db")

console = Console()

_TRUE_VALUES = {"1", "y", "yes", "true", "t", "correct"}


# ========================================
# Input Helpers
# ========================================


def _read_json(path: Path) -> Any:
    if not path.exists():
        rprint(f"[red]✗[/red] File not found: {path}")
        raise typer.Exit(code=1)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        rprint(f"[red]✗[/red] Invalid JSON in {path.name}: {e}")
        raise typer.Exit(code=1)


def _load_progress(path: Path) -> StudentProgress:
    data = _read_json(path)
    if isinstance(data, dict) and isinstance(data.get("progress"), dict):
        data = data["progress"]
    if not isinstance(data, dict):
        rprint(f"[red]✗[/red] {path.name} must be a JSON object mapping topics to progress")
        raise typer.Exit(code=1)
    try:
        return progress_from_dict(data)
    except (TypeError, ValueError) as e:
        rprint(f"[red]✗[/red] Invalid progress record in {path.name}: {e}")
        raise typer.Exit(code=1)


def _load_curriculum(path: Path) -> CurriculumGraph:
    try:
        return load_curriculum(path)
    except FileNotFoundError as e:
        rprint(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)
    except CurriculumError as e:
        rprint(f"[red]✗[/red] Invalid curriculum: {e}")
        raise typer.Exit(code=1)


def _print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def _status_text(status: MasteryStatus) -> Text:
    return Text(status.display_name, style=status.color)


# ========================================
# Analytics Commands
# ========================================


@app.command("mastery")
def show_mastery(
    progress_file: Path = typer.Argument(..., help="Student progress JSON"),
    topic: Optional[str] = typer.Option(None, "--topic", "-t", help="Only this topic"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Show mastery level, status and confidence per topic."""
    progress = _load_progress(progress_file)
    topics = [topic] if topic else list(progress)
    results = {t: topic_mastery(progress, t) for t in topics}

    if as_json:
        _print_json({t: r.to_dict() for t, r in results.items()})
        return

    table = Table(title="Topic Mastery", box=box.ROUNDED)
    table.add_column("Topic", style="cyan")
    table.add_column("Level", justify="right")
    table.add_column("", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Confidence", justify="right")
    table.add_column("Attempts", justify="right")

    for name, result in results.items():
        table.add_row(
            name,
            str(result.level),
            format_progress_bar(result.level),
            _status_text(result.status),
            f"{result.confidence:.2f}",
            str(result.total_attempts),
        )
    console.print(table)


@app.command("next-topic")
def show_next_topic(
    progress_file: Path = typer.Argument(..., help="Student progress JSON"),
    curriculum_file: Path = typer.Argument(..., help="Curriculum graph JSON"),
    alternatives: int = typer.Option(3, "--alternatives", "-a", help="Runner-up topics to list"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a panel"),
) -> None:
    """Recommend the next topic to study."""
    settings = get_settings()
    ranked = get_available_topics(
        _load_progress(progress_file),
        _load_curriculum(curriculum_file),
        threshold=settings.mastery_threshold,
        in_progress_floor=settings.in_progress_floor,
    )

    if as_json:
        _print_json({
            "recommendation": ranked[0].to_dict() if ranked else None,
            "alternatives": [r.to_dict() for r in ranked[1:1 + alternatives]],
        })
        return

    if not ranked:
        rprint("[yellow]⚠[/yellow] No recommendation available: every topic is mastered or locked")
        return

    best = ranked[0]
    console.print(
        Panel(
            f"[bold]{best.topic}[/bold]\n"
            f"Difficulty: {best.difficulty.value}   Importance: {best.importance}\n"
            f"Current mastery: {best.current_mastery} ({best.status.display_name})",
            title="[bold cyan]NEXT TOPIC[/bold cyan]",
            box=box.ROUNDED,
        )
    )

    if alternatives and len(ranked) > 1:
        table = Table(title="Also available", box=box.SIMPLE)
        table.add_column("Topic", style="cyan")
        table.add_column("Importance", justify="right")
        table.add_column("Mastery", justify="right")
        for rec in ranked[1:1 + alternatives]:
            table.add_row(rec.topic, str(rec.importance), str(rec.current_mastery))
        console.print(table)


@app.command("path")
def show_learning_path(
    progress_file: Path = typer.Argument(..., help="Student progress JSON"),
    curriculum_file: Path = typer.Argument(..., help="Curriculum graph JSON"),
    target: Optional[list[str]] = typer.Option(None, "--target", "-t", help="Target topic (repeatable)"),
    days: Optional[int] = typer.Option(None, "--days", "-d", min=1, help="Timeframe in days"),
    minutes: Optional[int] = typer.Option(None, "--minutes", "-m", min=1, help="Study minutes per day"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of tables"),
) -> None:
    """Generate a phased learning path with a daily schedule."""
    settings = get_settings()
    path = generate_learning_path(
        _load_progress(progress_file),
        _load_curriculum(curriculum_file),
        target_topics=target or [],
        timeframe_days=days or settings.default_timeframe_days,
        daily_minutes=minutes or settings.default_daily_minutes,
    )

    if as_json:
        _print_json(path.to_dict())
        return

    if not path.phases:
        rprint("[yellow]⚠[/yellow] No topics to schedule")
        return

    table = Table(title=f"Learning Path ({path.estimated_duration} days)", box=box.ROUNDED)
    table.add_column("Phase", justify="center", style="cyan")
    table.add_column("Days", justify="right")
    table.add_column("Topics")
    table.add_column("Milestones", style="dim")
    for phase in path.phases:
        table.add_row(
            str(phase.phase),
            str(phase.duration),
            ", ".join(phase.topics),
            "; ".join(phase.milestones),
        )
    console.print(table)

    minutes_per_day = path.daily_schedule[0].time_allocated if path.daily_schedule else 0
    rprint(f"[dim]{len(path.daily_schedule)} scheduled days, {minutes_per_day} minutes each[/dim]")


@app.command("gaps")
def show_gaps(
    assessments_file: Path = typer.Argument(..., help="Graded assessments JSON (list)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Identify severity-ranked learning gaps from graded assessments."""
    data = _read_json(assessments_file)
    if isinstance(data, dict):
        data = data.get("assessments", [data])
    if not isinstance(data, list):
        rprint(f"[red]✗[/red] {assessments_file.name} must contain a list of assessments")
        raise typer.Exit(code=1)

    settings = get_settings()
    try:
        assessments = assessments_from_list(data)
    except (AttributeError, TypeError, ValueError) as e:
        rprint(f"[red]✗[/red] Invalid assessment record in {assessments_file.name}: {e}")
        raise typer.Exit(code=1)
    gaps = identify_learning_gaps(assessments, gap_threshold=settings.gap_threshold)

    if as_json:
        _print_json({"summary": summarize_gaps(gaps), "gaps": [g.to_dict() for g in gaps]})
        return

    if not gaps:
        rprint("[green]✓[/green] No learning gaps found")
        return

    table = Table(title="Learning Gaps", box=box.ROUNDED)
    table.add_column("Topic", style="cyan")
    table.add_column("Severity", justify="center")
    table.add_column("Accuracy", justify="right")
    table.add_column("Wrong", justify="right")
    table.add_column("Recommendation", max_width=50)
    for gap in gaps:
        table.add_row(
            gap.topic,
            Text(gap.severity.value.upper(), style=gap.severity.color),
            f"{gap.accuracy}%",
            f"{gap.incorrect_count}/{gap.total_questions}",
            gap.recommendation,
        )
    console.print(table)


@app.command("velocity")
def show_velocity(
    progress_file: Path = typer.Argument(..., help="Student progress JSON"),
    weeks: Optional[int] = typer.Option(None, "--weeks", "-w", min=1, help="Look-back window"),
    now: Optional[str] = typer.Option(None, "--now", help="End of window (ISO timestamp)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """Show topics mastered per week over a recent window."""
    settings = get_settings()
    velocity = calculate_learning_velocity(
        _load_progress(progress_file),
        weeks=weeks or settings.velocity_window_weeks,
        now=_parse_now(now),
    )

    if as_json:
        _print_json(velocity.to_dict())
        return

    rprint(
        f"[bold]{velocity.topics_per_week:.2f}[/bold] topics/week ([cyan]{velocity.velocity.value}[/cyan]) - "
        f"{velocity.topics_mastered} mastered of {velocity.topics_started} started, "
        f"{velocity.average_time_per_topic:.0f} min/topic"
    )


@app.command("predict")
def show_prediction(
    topic: str = typer.Argument(..., help="Topic to project"),
    progress_file: Path = typer.Argument(..., help="Student progress JSON"),
    weeks: Optional[int] = typer.Option(None, "--weeks", "-w", min=1, help="Velocity window"),
    now: Optional[str] = typer.Option(None, "--now", help="End of velocity window (ISO timestamp)"),
) -> None:
    """Predict days until a topic reaches mastery."""
    settings = get_settings()
    progress = _load_progress(progress_file)
    velocity = calculate_learning_velocity(
        progress,
        weeks=weeks or settings.velocity_window_weeks,
        now=_parse_now(now),
    )
    days = predict_time_to_mastery(topic, progress, velocity, max_days=settings.max_prediction_days)

    if days == 0:
        rprint(f"[green]✓[/green] {topic} is already mastered")
    else:
        rprint(f"[cyan]{topic}[/cyan]: about [bold]{days}[/bold] days to mastery")


@app.command("difficulty")
def show_difficulty(
    results: Optional[list[str]] = typer.Argument(None, help="Recent outcomes, oldest first (1/0, y/n)"),
) -> None:
    """Pick the next question difficulty from recent outcomes."""
    outcomes = [{"correct": r.strip().lower() in _TRUE_VALUES} for r in (results or [])]
    rprint(calculate_optimal_difficulty(outcomes).value)


@app.command("validate-curriculum")
def validate_curriculum_file(
    curriculum_file: Path = typer.Argument(..., help="Curriculum graph JSON"),
) -> None:
    """Check that a curriculum is well-formed and acyclic."""
    graph = _load_curriculum(curriculum_file)
    roots = [t for t, spec in graph.items() if not spec.prerequisites]
    rprint(f"[green]✓[/green] {len(graph)} topics, {len(roots)} without prerequisites")


def _parse_now(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return parse_timestamp(value)
    except ValueError:
        rprint(f"[red]✗[/red] Invalid timestamp: {value}")
        raise typer.Exit(code=1)


# ========================================
# Store & Server Commands
# ========================================


@db_app.command("init")
def db_init() -> None:
    """
    Initialize progress store tables from SQLAlchemy models.

    Safe to run multiple times (idempotent).
    """
    from src.db.database import init_db

    init_db()
    rprint("[green]✓[/green] Database initialized!")


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind host"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


# ========================================
# Entry Point
# ========================================


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if settings.log_level == "DEBUG" else "WARNING",
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
