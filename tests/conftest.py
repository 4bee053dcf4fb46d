"""Pytest configuration and fixtures."""

import pytest

from gantry.models.tasks import VelocityConfig
from gantry.scheduling.timeline import Timeline


@pytest.fixture
def velocity() -> VelocityConfig:
    """80 points per week over a five-day week."""
    return VelocityConfig(velocity_per_week=80, working_days_per_week=5)


@pytest.fixture
def timeline(velocity: VelocityConfig) -> Timeline:
    """Scheduling engine at 80 points per week."""
    return Timeline(velocity)


@pytest.fixture
def sample_project() -> dict[str, object]:
    """Return a raw project as a data source would deliver it."""
    return {
        "id": "PVT_sample",
        "title": "Website Relaunch",
        "tasks": [
            {
                "id": "1",
                "title": "Design",
                "state": "CLOSED",
                "labels": ["HCD"],
                "startDate": "2024-01-01",
                "endDate": "2024-01-05",
                "storyPoints": 8,
                "githubUrl": "https://github.com/acme/site/issues/1",
                "body": "",
            },
            {
                "id": "2",
                "title": "Build API",
                "state": "OPEN",
                "labels": ["Engineering", "Product"],
                "storyPoints": 40,
                "githubUrl": "https://github.com/acme/site/issues/2",
                "body": "Depends on #1",
            },
            {
                "id": "3",
                "title": "Write docs",
                "state": "OPEN",
                "labels": [],
                "body": "blocked by #2\n```\ndepends on #99\n```",
            },
            {
                "id": "4",
                "title": "Launch",
                "state": "OPEN",
                "labels": ["Product"],
                "body": "depends on #1",
                "dependencies": [{"type": "start-to-start", "targetId": "3"}],
            },
        ],
    }
