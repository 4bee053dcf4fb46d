"""Dependency-constrained scheduling engine."""

from gantry.scheduling.dependencies import (
    expand_issue_lists,
    extract_dependencies,
    extract_typed_dependencies,
    strip_code,
)
from gantry.scheduling.estimation import (
    calculate_end_date,
    estimate_duration,
    estimated_days,
)
from gantry.scheduling.orchestrator import ProjectSource, ScheduleOrchestrator
from gantry.scheduling.timeline import Timeline, TraversalResult, required_start

__all__ = [
    # Extraction
    "extract_dependencies",
    "extract_typed_dependencies",
    "strip_code",
    "expand_issue_lists",
    # Estimation
    "estimate_duration",
    "estimated_days",
    "calculate_end_date",
    # Engine
    "Timeline",
    "TraversalResult",
    "required_start",
    # Orchestration
    "ScheduleOrchestrator",
    "ProjectSource",
]
