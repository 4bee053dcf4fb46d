"""Task, dependency and schedule models."""

from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Labels checked in order when deriving a task's category
DEFAULT_CATEGORY_PRIORITY: tuple[str, ...] = (
    "HCD",
    "Engineering",
    "Product",
    "Accessibility",
    "Content",
)
DEFAULT_CATEGORY = "General"
CLOSED_STATE = "CLOSED"


def to_utc(value: Any) -> Any:
    """Coerce strings, dates and naive datetimes into aware UTC datetimes.

    Bare ``YYYY-MM-DD`` values mean midnight UTC, which keeps calendar dates
    stable regardless of the caller's timezone.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    return value


def format_date(value: datetime | None) -> str | None:
    """Render a datetime as a UTC calendar date (YYYY-MM-DD)."""
    if value is None:
        return None
    return value.astimezone(UTC).strftime("%Y-%m-%d")


class RelationType(StrEnum):
    """Temporal coupling between two tasks' start/end boundaries."""

    FINISH_TO_START = "finish-to-start"
    START_TO_START = "start-to-start"
    FINISH_TO_FINISH = "finish-to-finish"
    START_TO_FINISH = "start-to-finish"


class Dependency(BaseModel):
    """Directed edge from the owning task to ``target_id``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: RelationType = RelationType.FINISH_TO_START
    target_id: str = Field(alias="targetId")

    @field_validator("target_id", mode="before")
    @classmethod
    def coerce_target_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class VelocityConfig(BaseModel):
    """Team velocity used to turn story points into calendar time.

    Zero or missing values fall back to the defaults; ``velocity_per_week``
    defaults to ``team_size * points_per_person_per_week``.
    """

    model_config = ConfigDict(frozen=True)

    team_size: int = 10
    points_per_person_per_week: float = 8
    velocity_per_week: float = 80
    working_days_per_week: int = 5

    @model_validator(mode="before")
    @classmethod
    def apply_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        values = dict(data)
        for name, default in (
            ("team_size", 10),
            ("points_per_person_per_week", 8),
            ("working_days_per_week", 5),
        ):
            if not values.get(name):
                values[name] = default
        if not values.get("velocity_per_week"):
            values["velocity_per_week"] = (
                values["team_size"] * values["points_per_person_per_week"]
            )
        return values


class RawTaskRecord(BaseModel):
    """A task-like record as supplied by the data source."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str = ""
    state: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    story_points: int | float | None = None
    assignee: str | None = None
    labels: list[str] = Field(default_factory=list)
    body: str | None = None
    github_url: str | None = None
    number: int | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    # None means "not resolved yet"; an empty list means "no dependencies"
    dependencies: list[Dependency] | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("title", mode="before")
    @classmethod
    def default_title(cls, v: Any) -> Any:
        return v or ""

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Any:
        return to_utc(v)

    @field_validator("story_points")
    @classmethod
    def check_story_points(cls, v: int | float | None) -> int | float | None:
        if v is not None and v < 0:
            raise ValueError("story points must be non-negative")
        return v


class RawProject(BaseModel):
    """A complete, immutable batch of raw records for one project."""

    id: str
    title: str | None = None
    tasks: list[RawTaskRecord] = Field(default_factory=list)


class GanttTask(BaseModel):
    """Visualization-ready projection of a scheduled task."""

    id: str
    name: str
    start: str | None
    end: str | None
    progress: int = 0
    dependencies: str = ""
    custom_class: str
    github_url: str | None = None


class Task(BaseModel):
    """A schedulable unit of work.

    Dates are aware UTC datetimes. The scheduling engine mutates
    ``start_date``/``end_date`` in place and nothing else.
    """

    id: str
    title: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None
    story_points: int | float | None = None
    dependencies: list[Dependency] = Field(default_factory=list)
    state: str | None = None
    labels: list[str] = Field(default_factory=list)
    github_url: str | None = None
    assignee: str | None = None
    progress: int | None = Field(default=None, ge=0, le=100)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Any:
        return to_utc(v)

    @field_validator("story_points")
    @classmethod
    def check_story_points(cls, v: int | float | None) -> int | float | None:
        if v is not None and v < 0:
            raise ValueError("story points must be non-negative")
        return v

    @classmethod
    def from_record(cls, record: RawTaskRecord) -> "Task":
        """Wrap a raw record; dependencies are attached separately."""
        return cls(
            id=record.id,
            title=record.title,
            start_date=record.start_date,
            end_date=record.end_date,
            story_points=record.story_points,
            state=record.state,
            labels=list(record.labels),
            github_url=record.github_url,
            assignee=record.assignee,
            progress=record.progress,
        )

    @property
    def is_completed(self) -> bool:
        return (self.state or "").upper() == CLOSED_STATE

    @property
    def is_dated(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    def add_dependency(self, dependency: Dependency) -> None:
        self.dependencies.append(dependency)

    def category(self, priority: tuple[str, ...] | list[str] = DEFAULT_CATEGORY_PRIORITY) -> str:
        """First label found in ``priority``, otherwise ``General``."""
        for candidate in priority:
            if candidate in self.labels:
                return candidate
        return DEFAULT_CATEGORY

    def to_gantt(
        self, priority: tuple[str, ...] | list[str] = DEFAULT_CATEGORY_PRIORITY
    ) -> GanttTask:
        """Project the task into the timeline widget's record format."""
        category = self.category(priority)
        if self.progress is not None:
            progress = self.progress
        else:
            progress = 100 if self.is_completed else 0
        return GanttTask(
            id=self.id,
            name=self.title,
            start=format_date(self.start_date),
            end=format_date(self.end_date),
            progress=progress,
            dependencies=",".join(dep.target_id for dep in self.dependencies),
            custom_class="-".join(category.lower().split()) + "-task",
            github_url=self.github_url,
        )


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProjectInfo(_CamelModel):
    id: str
    title: str | None = None
    last_updated: str


class ProjectStats(_CamelModel):
    """Aggregate counts over one scheduled project."""

    total_tasks: int = 0
    completed_tasks: int = 0
    total_story_points: int | float = 0
    completed_story_points: int | float = 0
    categories: dict[str, int] = Field(default_factory=dict)


class ScheduleResult(_CamelModel):
    """Output of one scheduling run, serialized with camelCase keys."""

    project: ProjectInfo
    tasks: list[GanttTask] = Field(default_factory=list)
    critical_path: list[str] = Field(default_factory=list)
    stats: ProjectStats = Field(default_factory=ProjectStats)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-serializable artifact shape."""
        return self.model_dump(mode="json", by_alias=True)
