"""GitHub Projects data source."""

from gantry.github.repository import DEFAULT_API_URL, GitHubProjectRepository

__all__ = ["DEFAULT_API_URL", "GitHubProjectRepository"]
