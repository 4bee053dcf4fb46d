"""Date estimation, dependency propagation and critical path search."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import structlog

from gantry.errors import SchedulingError
from gantry.models.tasks import Dependency, RelationType, Task, VelocityConfig, to_utc
from gantry.scheduling.estimation import estimated_days

log = structlog.get_logger()

ONE_DAY = timedelta(days=1)


@dataclass
class TraversalResult:
    """Dependency-first visiting order over a task set."""

    order: list[Task] = field(default_factory=list)
    # (task_id, target_id) edges that re-entered a task still being visited
    cycles: list[tuple[str, str]] = field(default_factory=list)


def today_utc() -> datetime:
    """Midnight UTC of the current day."""
    now = datetime.now(UTC)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def required_start(dependency: Dependency, target: Task, duration: timedelta) -> datetime:
    """Earliest start a dependency allows for a task lasting ``duration``."""
    assert target.start_date is not None and target.end_date is not None
    match dependency.type:
        case RelationType.START_TO_START:
            return target.start_date
        case RelationType.FINISH_TO_FINISH:
            return target.end_date - duration
        case RelationType.START_TO_FINISH:
            return target.start_date - duration
        case _:
            return target.end_date + ONE_DAY


class Timeline:
    """Scheduling engine for one velocity configuration.

    All traversal state lives for a single call; a Timeline can be reused
    across runs.
    """

    def __init__(self, velocity: VelocityConfig | None = None) -> None:
        self.velocity = velocity or VelocityConfig()

    # =========================================================================
    # Traversal
    # =========================================================================

    def dependency_order(self, tasks: list[Task]) -> TraversalResult:
        """Visit every task once, dependencies before dependents.

        Re-entering a task that is still being visited means a cycle. That
        edge is recorded and contributes no ordering constraint, so cycles
        are broken where they are first met in input order.
        """
        task_map = {task.id: task for task in tasks}
        result = TraversalResult()
        finalized: set[str] = set()
        in_progress: set[str] = set()

        for task in tasks:
            self._visit(task, task_map, finalized, in_progress, result)

        if result.cycles:
            log.warning(
                "dependency_cycle_detected",
                edges=[f"{source}->{target}" for source, target in result.cycles],
            )
        return result

    def _visit(
        self,
        task: Task,
        task_map: dict[str, Task],
        finalized: set[str],
        in_progress: set[str],
        result: TraversalResult,
    ) -> None:
        if task.id in finalized:
            return

        in_progress.add(task.id)
        for dependency in task.dependencies:
            target = task_map.get(dependency.target_id)
            if target is None:
                continue
            if target.id in in_progress:
                result.cycles.append((task.id, target.id))
                continue
            self._visit(target, task_map, finalized, in_progress, result)

        in_progress.discard(task.id)
        finalized.add(task.id)
        result.order.append(task)

    # =========================================================================
    # Estimation
    # =========================================================================

    def estimate_dates(
        self,
        tasks: list[Task],
        start: datetime | None = None,
        *,
        order: list[Task] | None = None,
    ) -> list[Task]:
        """Give undated tasks back-to-back dates from their story points.

        Tasks are laid out in dependency order from ``start`` (default: today,
        midnight UTC). Each estimated task is followed by a one-day buffer.
        Tasks that already have both dates are left alone and do not move
        the cursor.

        Args:
            tasks: Tasks to estimate, mutated in place
            start: Cursor for the first estimated task
            order: Precomputed dependency order (see dependency_order)

        Returns:
            The tasks that received estimated dates
        """
        cursor = to_utc(start) if start is not None else today_utc()
        estimated: list[Task] = []

        if order is None:
            order = self.dependency_order(tasks).order

        for task in order:
            if task.is_dated:
                continue
            if task.story_points:
                days = estimated_days(task.story_points, self.velocity)
            else:
                days = 1
            task.start_date = cursor
            task.end_date = cursor + timedelta(days=days)
            cursor = task.end_date + ONE_DAY
            estimated.append(task)

        log.debug("dates_estimated", estimated=len(estimated), total=len(tasks))
        return estimated

    # =========================================================================
    # Propagation
    # =========================================================================

    def propagate(self, tasks: list[Task], *, order: list[Task] | None = None) -> list[Task]:
        """Shift tasks so every resolvable dependency is satisfied.

        A task moves to the latest start any of its dependencies requires,
        never earlier than where it already is. Start and end move together
        so the task keeps its duration.

        Args:
            tasks: Fully dated tasks, mutated in place
            order: Precomputed dependency order (see dependency_order)

        Returns:
            The tasks whose dates changed

        Raises:
            SchedulingError: If any task is missing a start or end date
        """
        undated = [task.id for task in tasks if not task.is_dated]
        if undated:
            raise SchedulingError(
                "All tasks need dates before propagation; run estimate_dates first",
                details={"undated": undated},
            )

        task_map = {task.id: task for task in tasks}
        if order is None:
            order = self.dependency_order(tasks).order
        moved = [task for task in order if self._apply_constraints(task, task_map)]

        log.debug("dependencies_propagated", moved=len(moved), total=len(tasks))
        return moved

    def _apply_constraints(self, task: Task, task_map: dict[str, Task]) -> bool:
        assert task.start_date is not None and task.end_date is not None
        duration = task.end_date - task.start_date
        latest = task.start_date

        for dependency in task.dependencies:
            target = task_map.get(dependency.target_id)
            if target is None:
                continue
            candidate = required_start(dependency, target, duration)
            if candidate > latest:
                latest = candidate

        if latest == task.start_date:
            return False

        task.start_date = latest
        task.end_date = latest + duration
        return True

    # =========================================================================
    # Critical path
    # =========================================================================

    def critical_path(self, tasks: list[Task]) -> list[str]:
        """Longest dependency chain, measured in number of tasks.

        This is not a duration-weighted critical path: a chain of three
        one-day tasks beats a single month-long task. Equal-length candidates
        resolve to the first one found (dependency list order, then input
        order). Cycles terminate at the point of re-entry.

        Returns:
            Task ids from the chain's first task to its last, or [] for no tasks
        """
        task_map = {task.id: task for task in tasks}
        memo: dict[str, list[str]] = {}
        in_progress: set[str] = set()

        critical: list[str] = []
        for task in tasks:
            path = self._longest_path(task.id, task_map, memo, in_progress)
            if len(path) > len(critical):
                critical = path
        return critical

    def _longest_path(
        self,
        task_id: str,
        task_map: dict[str, Task],
        memo: dict[str, list[str]],
        in_progress: set[str],
    ) -> list[str]:
        if task_id in memo:
            return memo[task_id]
        if task_id in in_progress:
            return []

        in_progress.add(task_id)
        longest: list[str] = []
        for dependency in task_map[task_id].dependencies:
            if dependency.target_id not in task_map:
                continue
            path = self._longest_path(dependency.target_id, task_map, memo, in_progress)
            if len(path) > len(longest):
                longest = path
        in_progress.discard(task_id)

        memo[task_id] = [*longest, task_id]
        return memo[task_id]
