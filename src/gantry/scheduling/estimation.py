"""Story-point to calendar-time estimation."""

import math
from datetime import datetime, timedelta

from gantry.errors import ValidationError
from gantry.models.tasks import VelocityConfig


def estimate_duration(story_points: float | None, velocity: VelocityConfig) -> float:
    """Duration in weeks for ``story_points`` at the configured velocity.

    Args:
        story_points: Effort score; zero or None means no duration
        velocity: Team velocity configuration

    Returns:
        Weeks of work (may be fractional)

    Raises:
        ValidationError: If points are positive but velocity is not
    """
    if not story_points:
        return 0.0
    if velocity.velocity_per_week <= 0:
        raise ValidationError(
            "velocity_per_week must be greater than zero to estimate durations",
            details={"velocity_per_week": velocity.velocity_per_week},
        )
    return story_points / velocity.velocity_per_week


def estimated_days(story_points: float | None, velocity: VelocityConfig) -> int:
    """Calendar days reserved when estimating missing dates.

    Rounds up so no task is scheduled shorter than its estimate.
    """
    weeks = estimate_duration(story_points, velocity)
    return math.ceil(weeks * velocity.working_days_per_week)


def calculate_end_date(
    story_points: float | None,
    start: datetime,
    velocity: VelocityConfig,
) -> datetime:
    """End date for a task of ``story_points`` starting at ``start``.

    Unlike :func:`estimated_days` this rounds to the nearest day (halves
    round up), so 2.5 days becomes 3 and 2.4 becomes 2.
    """
    if not story_points:
        return start
    weeks = estimate_duration(story_points, velocity)
    days = math.floor(weeks * velocity.working_days_per_week + 0.5)
    return start + timedelta(days=days)
