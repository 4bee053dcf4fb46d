"""Scheduling orchestrator: raw project records in, Gantt-ready schedule out."""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Protocol

import structlog

from gantry.models.tasks import (
    DEFAULT_CATEGORY_PRIORITY,
    Dependency,
    ProjectInfo,
    ProjectStats,
    RawProject,
    RawTaskRecord,
    ScheduleResult,
    Task,
)
from gantry.scheduling.dependencies import extract_typed_dependencies
from gantry.scheduling.timeline import Timeline

log = structlog.get_logger()


class ProjectSource(Protocol):
    """Anything that can supply a complete batch of raw project records."""

    async def fetch_project(self, project_id: str) -> RawProject: ...


class ScheduleOrchestrator:
    """Runs the full scheduling pipeline for one project.

    raw records -> dependencies attached -> dates estimated -> dates
    propagated -> critical path -> output projection + statistics.
    """

    def __init__(
        self,
        timeline: Timeline | None = None,
        category_priority: Sequence[str] = DEFAULT_CATEGORY_PRIORITY,
        repository: ProjectSource | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            timeline: Scheduling engine (default velocity when omitted)
            category_priority: Labels checked in order to pick a task's category
            repository: Data source used by fetch_and_process
        """
        self.timeline = timeline or Timeline()
        self.category_priority = tuple(category_priority)
        self.repository = repository

    def build_tasks(self, records: Sequence[RawTaskRecord]) -> list[Task]:
        """Wrap raw records as Tasks with their dependencies attached.

        Records that arrive with resolved dependencies keep them; otherwise
        the issue body is parsed, including explicit relation-type tags.
        Parsed references name issue numbers, so they are mapped onto the
        ids of the records carrying those numbers. Unknown numbers are kept
        as-is.
        """
        ids_by_number = {
            str(record.number): record.id for record in records if record.number is not None
        }

        tasks: list[Task] = []
        for record in records:
            task = Task.from_record(record)
            if record.dependencies is not None:
                dependencies = record.dependencies
            else:
                dependencies = [
                    Dependency(
                        type=dependency.type,
                        target_id=ids_by_number.get(dependency.target_id, dependency.target_id),
                    )
                    for dependency in extract_typed_dependencies(record.body)
                ]
            for dependency in dependencies:
                task.add_dependency(dependency)
            tasks.append(task)
        return tasks

    def process(
        self,
        raw_project: RawProject,
        *,
        start: datetime | None = None,
        now: datetime | None = None,
    ) -> ScheduleResult:
        """Schedule a project and project it for the timeline widget.

        Args:
            raw_project: Complete batch of raw records
            start: Cursor for estimated dates (default: today, midnight UTC)
            now: Timestamp reported as lastUpdated (default: current time)

        Returns:
            ScheduleResult with tasks, critical path and statistics
        """
        tasks = self.build_tasks(raw_project.tasks)

        # The graph does not change between passes, so it is traversed once
        order = self.timeline.dependency_order(tasks).order
        estimated = self.timeline.estimate_dates(tasks, start=start, order=order)
        moved = self.timeline.propagate(tasks, order=order)
        critical_path = self.timeline.critical_path(tasks)

        result = ScheduleResult(
            project=ProjectInfo(
                id=raw_project.id,
                title=raw_project.title,
                last_updated=(now or datetime.now(UTC)).isoformat(),
            ),
            tasks=[task.to_gantt(self.category_priority) for task in tasks],
            critical_path=critical_path,
            stats=self.calculate_stats(tasks),
        )

        log.info(
            "project_scheduled",
            project_id=raw_project.id,
            tasks=len(tasks),
            estimated=len(estimated),
            moved=len(moved),
            critical_path_length=len(critical_path),
        )
        return result

    def calculate_stats(self, tasks: Sequence[Task]) -> ProjectStats:
        """Totals, completion and per-category counts."""
        stats = ProjectStats(total_tasks=len(tasks))
        for task in tasks:
            points = task.story_points or 0
            stats.total_story_points += points
            if task.is_completed:
                stats.completed_tasks += 1
                stats.completed_story_points += points

            category = task.category(self.category_priority)
            stats.categories[category] = stats.categories.get(category, 0) + 1
        return stats

    async def fetch_and_process(self, project_id: str) -> ScheduleResult:
        """Fetch a project from the repository and schedule it.

        Retrieval errors propagate unchanged; nothing is scheduled from a
        partial batch.

        Raises:
            RuntimeError: If no repository was configured
            DataSourceError: If the data source fails
        """
        if self.repository is None:
            raise RuntimeError("ScheduleOrchestrator has no repository configured")

        raw_project = await self.repository.fetch_project(project_id)
        return self.process(raw_project)
