"""Custom exceptions for Gantry."""


class GantryError(Exception):
    """Base exception for all Gantry errors."""

    def __init__(self, message: str, *, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(GantryError):
    """Raised when required settings are missing or invalid."""


class ValidationError(GantryError):
    """Raised when input validation fails."""


class SchedulingError(GantryError):
    """Raised when the scheduling engine is used out of order."""


class DataSourceError(GantryError):
    """Raised when raw project data cannot be retrieved."""


class GitHubAPIError(DataSourceError):
    """Raised when the GitHub API answers with a non-success status."""

    def __init__(self, status_code: int, reason: str) -> None:
        super().__init__(
            f"GitHub API error: {status_code} {reason}",
            details={"status_code": status_code, "reason": reason},
        )
        self.status_code = status_code


class GraphQLError(DataSourceError):
    """Raised when a GraphQL response carries an errors array."""

    def __init__(self, messages: list[str]) -> None:
        super().__init__(
            f"GraphQL errors: {', '.join(messages)}",
            details={"messages": messages},
        )
        self.messages = messages


class ProjectNotFoundError(DataSourceError):
    """Raised when the requested project node does not exist."""

    def __init__(self, project_id: str) -> None:
        super().__init__(
            f"Project not found: {project_id}",
            details={"project_id": project_id},
        )
