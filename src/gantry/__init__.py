"""Gantry - dependency-aware schedules for GitHub Projects.

Turns project issues with free-text dependencies, optional dates and story
points into a fully dated, dependency-consistent Gantt schedule.
"""

from gantry.logging import configure_logging

# Configure logging FIRST before any other modules use structlog
configure_logging()

from gantry.config import Settings  # noqa: E402 - must come after logging config

__version__ = "0.1.0"
__all__ = ["Settings", "__version__"]
