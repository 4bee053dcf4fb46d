"""Configuration management for Gantry."""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from gantry.models.tasks import DEFAULT_CATEGORY_PRIORITY, VelocityConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GANTRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # GitHub data source
    github_token: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("github_token", "GANTRY_GITHUB_TOKEN", "GITHUB_TOKEN"),
        description="GitHub token with read access to the project",
    )
    project_id: str = Field(
        default="",
        validation_alias=AliasChoices("project_id", "GANTRY_PROJECT_ID", "PROJECT_ID"),
        description="GitHub Projects v2 node id (e.g. PVT_kwDO...)",
    )
    github_api_url: str = Field(
        default="https://api.github.com/graphql",
        description="GitHub GraphQL endpoint",
    )
    page_size: int = Field(default=50, ge=1, le=100, description="Project items per page")
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout (seconds)")

    # Velocity model
    team_size: int = Field(default=10, ge=0, description="People working on the project")
    points_per_person_per_week: float = Field(
        default=8, ge=0, description="Story points one person completes per week"
    )
    velocity_per_week: float | None = Field(
        default=None,
        gt=0,
        description="Team velocity override (defaults to team_size * points_per_person_per_week)",
    )
    working_days_per_week: int = Field(
        default=5, ge=1, le=7, description="Working days used to convert weeks into days"
    )

    # Output
    category_priority: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORY_PRIORITY),
        description="Labels checked in order to pick a task's category",
    )
    output_dir: Path = Field(default=Path("docs"), description="Where artifacts are written")

    def velocity(self) -> VelocityConfig:
        """Build the velocity configuration for one scheduling run."""
        return VelocityConfig(
            team_size=self.team_size,
            points_per_person_per_week=self.points_per_person_per_week,
            velocity_per_week=self.velocity_per_week,
            working_days_per_week=self.working_days_per_week,
        )
