"""
ATS Tracker Command Line Interface

Provides CLI commands for database setup, offline skill matching and
day-to-day application tracking operations.
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ats_tracker.utils.constants import APP_DISPLAY_NAME

app = typer.Typer(
    name="ats-tracker",
    help=f"{APP_DISPLAY_NAME} CLI",
    add_completion=False,
)
console = Console()


def _split(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _require_connection() -> None:
    from ats_tracker.data.database import get_database_manager

    if not get_database_manager().check_sync_connection():
        console.print("[red]Error: Could not connect to MongoDB. Run 'init-db' first.[/red]")
        raise typer.Exit(1)


def _actor(actor_id: str, name: Optional[str]):
    from ats_tracker.data.models import Actor

    return Actor(id=actor_id, name=name, role="recruiter")


def _run_tracking(coro_factory):
    """Run an orchestrator coroutine, turning domain errors into exit code 1."""
    from ats_tracker.core.exceptions import ApplicationTrackingError
    from ats_tracker.core.tracking import get_tracking_orchestrator
    from ats_tracker.data.database import get_database_manager

    try:
        return asyncio.run(coro_factory(get_tracking_orchestrator()))
    except ApplicationTrackingError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    finally:
        get_database_manager().close_all()


@app.command()
def version():
    """Show application version."""
    from ats_tracker import __app_name__, __version__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show configuration."""
    from ats_tracker.utils.config import get_settings

    settings = get_settings()

    table = Table(title="ATS Tracker Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Database Host", settings.database.host)
    table.add_row("Database Name", settings.database.name)
    table.add_row("Skill Match Threshold", f"{settings.screening.skill_match_threshold:.2f}")
    table.add_row("Stale After (days)", str(settings.screening.stale_after_days))
    table.add_row(
        "Screening Weights",
        ", ".join(f"{k}={v:g}" for k, v in settings.screening.weights.items()),
    )
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def init_db():
    """Initialize the database with required indexes."""
    from ats_tracker.data.database import get_database_manager

    console.print("[yellow]Initializing database...[/yellow]")
    _require_connection()
    console.print("  [green]✓[/green] Connected to MongoDB")

    db_manager = get_database_manager()
    try:
        asyncio.run(db_manager.ensure_indexes())
    except Exception as e:
        console.print(f"[red]Error creating indexes: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    finally:
        db_manager.close_all()

    console.print("  [green]✓[/green] Indexes created")
    console.print("\n[green]Database initialized successfully![/green]")


@app.command()
def match_skills(
    candidate: str = typer.Option(..., "--candidate", "-c", help="Comma-separated candidate skills"),
    required: str = typer.Option("", "--required", "-r", help="Comma-separated required skills"),
    threshold: Optional[float] = typer.Option(
        None, "--threshold", "-t", min=0.0, max=1.0, help="Similarity threshold"
    ),
):
    """Fuzzy-match candidate skills against required skills (no database needed)."""
    from ats_tracker.core.matching import SkillMatcher

    result = SkillMatcher(threshold=threshold).match(_split(candidate), _split(required))

    table = Table(title=f"Skill Match ({result.score:.0f}%)")
    table.add_column("Required", style="cyan")
    table.add_column("Matched By")
    table.add_column("Confidence", justify="right")

    for match in result.matches:
        table.add_row(match.skill, f"[green]{match.matched_skill}[/green]", f"{match.confidence:.2f}")
    for skill in result.missing:
        table.add_row(skill, "[red]missing[/red]", "-")

    console.print(table)
    if result.additional:
        console.print(f"[dim]Additional:[/dim] {', '.join(result.additional)}")
    for note in result.recommendations:
        console.print(f"  • {note}")


@app.command()
def list_applications(
    job: Optional[str] = typer.Option(None, "--job", "-j", help="Filter by job id"),
    status: Optional[list[str]] = typer.Option(None, "--status", "-s", help="Filter by status"),
    search: Optional[str] = typer.Option(None, "--search", help="Free-text search"),
    page: int = typer.Option(1, "--page", min=1),
    limit: int = typer.Option(20, "--limit", "-l", min=1, max=100),
):
    """List applications."""
    from pydantic import ValidationError

    from ats_tracker.data.models import ApplicationPage, ApplicationSearch
    from ats_tracker.data.repositories import ApplicationRepository

    try:
        query = ApplicationSearch(
            job_id=job, status=status or None, search=search, page=page, limit=limit
        )
    except ValidationError as e:
        console.print(f"[red]Invalid filters: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    _require_connection()
    items, total = ApplicationRepository().find_many(query)
    result = ApplicationPage(items=items, total=total, page=page, limit=limit)

    if not items:
        console.print("[yellow]No applications found.[/yellow]")
        return

    table = Table(title=f"Applications (page {result.page}/{result.total_pages}, {total} total)")
    table.add_column("ID", style="dim")
    table.add_column("Candidate", style="cyan")
    table.add_column("Status")
    table.add_column("Stage")
    table.add_column("Score", justify="right")
    table.add_column("Rating", justify="right")
    table.add_column("Stale")

    for application in items:
        score = application.screening_data.auto_screening_score
        table.add_row(
            str(application.id),
            application.candidate_display_name,
            application.status,
            application.stage,
            "-" if score is None else str(score),
            "-" if application.rating is None else str(application.rating),
            "[red]yes[/red]" if application.is_stale else "no",
        )

    console.print(table)


@app.command()
def show_application(
    application_id: str = typer.Argument(..., help="Application id"),
    timeline: bool = typer.Option(True, "--timeline/--no-timeline", help="Show timeline"),
):
    """Show application details and its timeline."""

    async def _show(orchestrator):
        application = await orchestrator.get(application_id)
        view = await orchestrator.get_timeline(application_id)
        results = await orchestrator.get_screening_results(application_id)
        return application, view, results

    _require_connection()
    application, view, results = _run_tracking(_show)

    console.print(f"[bold]{application.candidate_display_name}[/bold] [dim]({application.id})[/dim]")
    console.print(f"  Job: {application.job_id}")
    console.print(f"  Status: [cyan]{application.status}[/cyan]  Stage: [cyan]{application.stage}[/cyan]")
    console.print(f"  Applied: {application.applied_at:%Y-%m-%d %H:%M}  "
                  f"({application.days_since_applied} days ago)")
    console.print(f"  Screening score: {results.auto_screening_score}"
                  f"{' (estimated)' if results.computed_on_read else ''}")
    for note in results.recommendations:
        console.print(f"    • {note}")

    if timeline and view.timeline:
        table = Table(title="Timeline")
        table.add_column("When", style="dim")
        table.add_column("Action", style="cyan")
        table.add_column("Description")
        table.add_column("By")
        for entry in view.timeline:
            table.add_row(
                f"{entry.timestamp:%Y-%m-%d %H:%M}",
                entry.action,
                entry.description,
                entry.performed_by_name,
            )
        console.print(table)


@app.command()
def set_status(
    application_id: str = typer.Argument(..., help="Application id"),
    status: str = typer.Argument(..., help="New status"),
    actor: str = typer.Option(..., "--actor", "-a", help="Acting user id"),
    actor_name: Optional[str] = typer.Option(None, "--actor-name", help="Acting user name"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n"),
):
    """Move an application to a new status."""
    from ats_tracker.data.models import ApplicationUpdate
    from ats_tracker.utils.constants import ApplicationStatus

    try:
        new_status = ApplicationStatus(status.lower())
    except ValueError:
        console.print(f"[red]Unknown status: {escape(status)}[/red]")
        raise typer.Exit(1)

    patch = ApplicationUpdate(status=new_status, notes=notes)
    _require_connection()
    updated = _run_tracking(
        lambda orchestrator: orchestrator.update(application_id, patch, _actor(actor, actor_name))
    )
    console.print(
        f"[green]✓[/green] {updated.id}: status [cyan]{updated.status}[/cyan], "
        f"stage [cyan]{updated.stage}[/cyan]"
    )


@app.command()
def reject(
    application_id: str = typer.Argument(..., help="Application id"),
    reason: str = typer.Option(..., "--reason", "-r"),
    actor: str = typer.Option(..., "--actor", "-a", help="Acting user id"),
    feedback: Optional[str] = typer.Option(None, "--feedback"),
    send_feedback: bool = typer.Option(False, "--send-feedback"),
):
    """Reject an application."""
    _require_connection()
    updated = _run_tracking(
        lambda orchestrator: orchestrator.reject(
            application_id,
            reason,
            actor=_actor(actor, None),
            feedback=feedback,
            send_feedback=send_feedback,
        )
    )
    console.print(f"[green]✓[/green] {updated.id} rejected")


@app.command()
def rescreen(
    application_id: str = typer.Argument(..., help="Application id"),
    actor: str = typer.Option("system", "--actor", "-a", help="Acting user id"),
):
    """Recompute an application's auto-screening score."""
    _require_connection()
    updated = _run_tracking(
        lambda orchestrator: orchestrator.rescreen(application_id, _actor(actor, None))
    )
    console.print(
        f"[green]✓[/green] {updated.id}: screening score "
        f"[bold]{updated.screening_data.auto_screening_score}[/bold]"
    )


def main():
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
