"""Main CLI application.

This is the entry point for the gantry CLI.
"""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, Any

import httpx
import typer
from pydantic import ValidationError as PydanticValidationError

from gantry.cli.common import (
    CORAL,
    ELECTRIC_PURPLE,
    NEON_CYAN,
    console,
    create_panel,
    create_table,
    error,
    format_relation,
    info,
    run_async,
    spinner,
    success,
)
from gantry.config import Settings
from gantry.errors import GantryError
from gantry.github.repository import GitHubProjectRepository
from gantry.logging import configure_logging
from gantry.models.tasks import RawProject, ScheduleResult, VelocityConfig, format_date
from gantry.scheduling.dependencies import extract_dependencies, extract_typed_dependencies
from gantry.scheduling.estimation import calculate_end_date, estimate_duration, estimated_days
from gantry.scheduling.orchestrator import ScheduleOrchestrator
from gantry.scheduling.timeline import Timeline, today_utc

app = typer.Typer(
    name="gantry",
    help="Gantry - dependency-aware Gantt schedules for GitHub Projects",
    add_completion=False,
    no_args_is_help=True,
)

TeamSizeOption = Annotated[int | None, typer.Option("--team-size", help="People on the team")]
PointsPerPersonOption = Annotated[
    float | None, typer.Option("--points-per-person", help="Points per person per week")
]
VelocityOption = Annotated[
    float | None, typer.Option("--velocity", help="Team velocity override (points per week)")
]
WorkingDaysOption = Annotated[
    int | None, typer.Option("--working-days", help="Working days per week")
]
StartOption = Annotated[
    datetime | None,
    typer.Option("--start", formats=["%Y-%m-%d"], help="First day for estimated tasks"),
]


def _velocity(
    settings: Settings,
    team_size: int | None,
    points_per_person: float | None,
    velocity: float | None,
    working_days: int | None,
) -> VelocityConfig:
    """Settings velocity with any command-line overrides applied."""
    base = settings.velocity()
    return VelocityConfig(
        team_size=team_size if team_size is not None else base.team_size,
        points_per_person_per_week=(
            points_per_person if points_per_person is not None else base.points_per_person_per_week
        ),
        # Re-derive from team size when only the team inputs were overridden
        velocity_per_week=velocity if velocity is not None else settings.velocity_per_week,
        working_days_per_week=(
            working_days if working_days is not None else base.working_days_per_week
        ),
    )


def _write_json(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def _print_summary(result: ScheduleResult) -> None:
    stats = result.stats
    table = create_table(result.project.title or result.project.id, "Metric", "Value")
    table.add_row("Total tasks", str(stats.total_tasks))
    table.add_row("Completed tasks", str(stats.completed_tasks))
    table.add_row("Total story points", str(stats.total_story_points))
    table.add_row("Completed story points", str(stats.completed_story_points))
    for category, count in sorted(stats.categories.items()):
        table.add_row(f"Category: {category}", str(count))
    console.print(table)

    if result.critical_path:
        path = " → ".join(result.critical_path)
        console.print(f"[{CORAL}]Critical path:[/{CORAL}] {path}")


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Configure logging before any command runs."""
    configure_logging("DEBUG" if verbose else Settings().log_level)


@app.command()
def fetch(
    project_id: Annotated[
        str | None, typer.Argument(help="ProjectV2 node id (default: GANTRY_PROJECT_ID)")
    ] = None,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Directory for JSON artifacts")
    ] = None,
    team_size: TeamSizeOption = None,
    points_per_person: PointsPerPersonOption = None,
    velocity: VelocityOption = None,
    working_days: WorkingDaysOption = None,
) -> None:
    """Fetch a GitHub project, schedule it and write tasks.json/metadata.json.

    Examples:
        gantry fetch PVT_kwDOABC123
        gantry fetch -o site/data --velocity 40
    """
    settings = Settings()
    project_id = project_id or settings.project_id
    output_dir = output or settings.output_dir

    if not project_id:
        error("A project id is required (argument or GANTRY_PROJECT_ID)")
        raise typer.Exit(1)

    velocity_config = _velocity(settings, team_size, points_per_person, velocity, working_days)

    @run_async
    async def _fetch() -> ScheduleResult:
        async with GitHubProjectRepository(
            settings.github_token.get_secret_value(),
            api_url=settings.github_api_url,
            page_size=settings.page_size,
            timeout=settings.request_timeout,
        ) as repository:
            orchestrator = ScheduleOrchestrator(
                timeline=Timeline(velocity_config),
                category_priority=settings.category_priority,
                repository=repository,
            )
            with spinner() as progress:
                progress.add_task("Fetching project...", total=None)
                return await orchestrator.fetch_and_process(project_id)

    console.print(create_panel(f"[{NEON_CYAN}]{project_id}[/{NEON_CYAN}]", title="Gantt fetch"))

    try:
        result = _fetch()
    except (GantryError, httpx.HTTPError) as e:
        _write_json(
            output_dir / "error.json",
            {
                "error": str(e),
                "timestamp": datetime.now(UTC).isoformat(),
                "projectId": project_id,
            },
        )
        error(f"Error fetching project data: {e}")
        raise typer.Exit(1) from e

    _print_summary(result)

    last_updated = result.project.last_updated
    tasks_path = output_dir / "tasks.json"
    _write_json(tasks_path, {**result.to_dict(), "lastUpdated": last_updated})
    success(f"Data written to {tasks_path}")

    metadata_path = output_dir / "metadata.json"
    _write_json(
        metadata_path,
        {
            "lastUpdated": last_updated,
            "taskCount": len(result.tasks),
            "projectId": project_id,
            "projectTitle": result.project.title,
        },
    )
    success(f"Metadata written to {metadata_path}")


@app.command()
def schedule(
    file: Annotated[Path, typer.Argument(help="Raw project JSON (id, title, tasks)")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write the schedule here")
    ] = None,
    start: StartOption = None,
    team_size: TeamSizeOption = None,
    points_per_person: PointsPerPersonOption = None,
    velocity: VelocityOption = None,
    working_days: WorkingDaysOption = None,
) -> None:
    """Schedule a local raw-project export without calling GitHub."""
    settings = Settings()

    try:
        raw_project = RawProject.model_validate_json(file.read_text(encoding="utf-8"))
    except (OSError, PydanticValidationError) as e:
        error(f"Could not read {file}: {e}")
        raise typer.Exit(1) from e

    orchestrator = ScheduleOrchestrator(
        timeline=Timeline(
            _velocity(settings, team_size, points_per_person, velocity, working_days)
        ),
        category_priority=settings.category_priority,
    )
    try:
        result = orchestrator.process(raw_project, start=start)
    except GantryError as e:
        error(e.message)
        raise typer.Exit(1) from e

    if output:
        _write_json(output, result.to_dict())
        _print_summary(result)
        success(f"Schedule written to {output}")
    else:
        console.print_json(data=result.to_dict())


@app.command()
def deps(
    text: Annotated[str, typer.Argument(help="Issue body text to scan")],
    typed: Annotated[
        bool, typer.Option("--typed/--basic", help="Recognize relation-type tags")
    ] = True,
) -> None:
    """Show the dependencies found in a piece of issue text."""
    found = extract_typed_dependencies(text) if typed else extract_dependencies(text)
    if not found:
        info("No dependencies found")
        return

    table = create_table("Dependencies", "Target", "Relation")
    for dependency in found:
        table.add_row(f"#{dependency.target_id}", format_relation(dependency.type.value))
    console.print(table)


@app.command()
def estimate(
    points: Annotated[float, typer.Argument(help="Story points to convert")],
    start: StartOption = None,
    team_size: TeamSizeOption = None,
    points_per_person: PointsPerPersonOption = None,
    velocity: VelocityOption = None,
    working_days: WorkingDaysOption = None,
) -> None:
    """Convert story points into weeks, reserved days and an end date."""
    settings = Settings()
    velocity_config = _velocity(settings, team_size, points_per_person, velocity, working_days)
    begin = start.replace(tzinfo=UTC) if start else today_utc()

    try:
        weeks = estimate_duration(points, velocity_config)
        days = estimated_days(points, velocity_config)
        end = calculate_end_date(points, begin, velocity_config)
    except GantryError as e:
        error(e.message)
        raise typer.Exit(1) from e

    table = create_table("Estimate", "Metric", "Value")
    table.add_row("Velocity (points/week)", f"{velocity_config.velocity_per_week:g}")
    table.add_row("Duration (weeks)", f"{weeks:.2f}")
    table.add_row("Reserved days", str(days))
    table.add_row("Start", format_date(begin) or "")
    table.add_row("End", f"[{ELECTRIC_PURPLE}]{format_date(end)}[/{ELECTRIC_PURPLE}]")
    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
