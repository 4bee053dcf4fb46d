"""Pydantic models for Gantry."""

from gantry.models.tasks import (
    DEFAULT_CATEGORY_PRIORITY,
    Dependency,
    GanttTask,
    ProjectInfo,
    ProjectStats,
    RawProject,
    RawTaskRecord,
    RelationType,
    ScheduleResult,
    Task,
    VelocityConfig,
)

__all__ = [
    "DEFAULT_CATEGORY_PRIORITY",
    "Dependency",
    "GanttTask",
    "ProjectInfo",
    "ProjectStats",
    "RawProject",
    "RawTaskRecord",
    "RelationType",
    "ScheduleResult",
    "Task",
    "VelocityConfig",
]
