"""GitHub Projects (v2) data source.

Pages through a project's items over the GraphQL API and maps issue content
and custom fields onto raw task records. Field names are matched loosely
("Start date", "Due", "Story Points", "Estimate", ...) because every project
names its fields differently.
"""

from types import TracebackType
from typing import Any

import httpx
import structlog

from gantry.errors import (
    ConfigurationError,
    DataSourceError,
    GitHubAPIError,
    GraphQLError,
    ProjectNotFoundError,
)
from gantry.models.tasks import RawProject, RawTaskRecord, to_utc

log = structlog.get_logger()

DEFAULT_API_URL = "https://api.github.com/graphql"

START_FIELD_PATTERNS = ("start", "begin", "started")
END_FIELD_PATTERNS = ("end", "due", "target", "finish", "deadline")
POINTS_FIELD_PATTERNS = ("story points", "points", "estimate", "effort", "size")

PROJECT_ITEMS_QUERY = """
query ProjectItems($projectId: ID!, $first: Int!, $cursor: String) {
  node(id: $projectId) {
    ... on ProjectV2 {
      id
      title
      items(first: $first, after: $cursor) {
        pageInfo {
          hasNextPage
          endCursor
        }
        nodes {
          id
          content {
            ... on Issue {
              title
              url
              number
              state
              body
              assignees(first: 10) { nodes { login } }
              labels(first: 10) { nodes { name color } }
            }
            ... on DraftIssue {
              title
              body
              assignees(first: 10) { nodes { login } }
            }
          }
          fieldValues(first: 20) {
            nodes {
              ... on ProjectV2ItemFieldDateValue {
                date
                field { ... on ProjectV2FieldCommon { name } }
              }
              ... on ProjectV2ItemFieldNumberValue {
                number
                field { ... on ProjectV2FieldCommon { name } }
              }
              ... on ProjectV2ItemFieldTextValue {
                text
                field { ... on ProjectV2FieldCommon { name } }
              }
              ... on ProjectV2ItemFieldSingleSelectValue {
                name
                field { ... on ProjectV2FieldCommon { name } }
              }
            }
          }
        }
      }
    }
  }
}
"""


def _matches(field_name: str, patterns: tuple[str, ...]) -> bool:
    return any(pattern in field_name for pattern in patterns)


class GitHubProjectRepository:
    """Async GraphQL client for one GitHub token."""

    def __init__(
        self,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        page_size: int = 50,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            token: GitHub token with read access to the project
            api_url: GraphQL endpoint
            page_size: Items requested per page
            timeout: Request timeout in seconds
            client: Pre-built client (owned by the caller)

        Raises:
            ConfigurationError: If no token is given
        """
        if not token:
            raise ConfigurationError("GitHub token is required")

        self.api_url = api_url
        self.page_size = page_size
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "GitHubProjectRepository":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this repository created it."""
        if self._owns_client:
            await self._client.aclose()

    def build_payload(self, project_id: str, cursor: str | None = None) -> dict[str, Any]:
        """GraphQL request body for one page of project items."""
        return {
            "query": PROJECT_ITEMS_QUERY,
            "variables": {
                "projectId": project_id,
                "first": self.page_size,
                "cursor": cursor,
            },
        }

    async def fetch_project(self, project_id: str) -> RawProject:
        """Fetch every item of a project, following pagination.

        Args:
            project_id: ProjectV2 node id

        Returns:
            RawProject with one record per item that has content

        Raises:
            GitHubAPIError: On a non-success HTTP status
            GraphQLError: If the response carries GraphQL errors
            ProjectNotFoundError: If the node does not resolve to a project
            DataSourceError: If the response or an item cannot be parsed
        """
        records: list[RawTaskRecord] = []
        title: str | None = None
        cursor: str | None = None
        pages = 0

        while True:
            project = await self._fetch_page(project_id, cursor)
            pages += 1
            if title is None:
                title = project.get("title")

            items = project.get("items") or {}
            try:
                records.extend(self.parse_items(items.get("nodes") or []))
            except ValueError as e:
                raise DataSourceError(
                    f"Malformed project item: {e}", details={"project_id": project_id}
                ) from e

            page_info = items.get("pageInfo") or {}
            cursor = page_info.get("endCursor")
            if not page_info.get("hasNextPage") or not cursor:
                break

        log.info("project_fetched", project_id=project_id, items=len(records), pages=pages)
        return RawProject(id=project_id, title=title, tasks=records)

    async def _fetch_page(self, project_id: str, cursor: str | None) -> dict[str, Any]:
        response = await self._client.post(
            self.api_url,
            json=self.build_payload(project_id, cursor),
            headers=self._headers,
        )
        if not response.is_success:
            raise GitHubAPIError(response.status_code, response.reason_phrase)

        try:
            data = response.json()
        except ValueError as e:
            raise DataSourceError(
                "GitHub returned a response that is not JSON",
                details={"status_code": response.status_code},
            ) from e
        if not isinstance(data, dict):
            raise DataSourceError("GitHub returned an unexpected response shape")

        if data.get("errors"):
            raise GraphQLError([str(err.get("message", err)) for err in data["errors"]])

        project = (data.get("data") or {}).get("node")
        if not project:
            raise ProjectNotFoundError(project_id)
        return project

    def parse_items(self, items: list[dict[str, Any]]) -> list[RawTaskRecord]:
        """Map project items to raw records, skipping items without content.

        Dependencies are left unresolved so the orchestrator parses bodies.
        """
        records: list[RawTaskRecord] = []
        for item in items:
            content = item.get("content")
            if not content:
                continue

            fields = self.parse_field_values((item.get("fieldValues") or {}).get("nodes") or [])
            assignees = (content.get("assignees") or {}).get("nodes") or []
            labels = (content.get("labels") or {}).get("nodes") or []

            records.append(
                RawTaskRecord(
                    id=item["id"],
                    title=content.get("title") or "",
                    github_url=content.get("url"),
                    number=content.get("number"),
                    state=content.get("state"),
                    body=content.get("body"),
                    assignee=assignees[0].get("login") if assignees else None,
                    labels=[label["name"] for label in labels if label.get("name")],
                    start_date=fields["start_date"],
                    end_date=fields["end_date"],
                    story_points=fields["story_points"],
                )
            )
        return records

    def parse_field_values(self, nodes: list[dict[str, Any]]) -> dict[str, Any]:
        """Pick start/end dates and story points out of custom field values."""
        result: dict[str, Any] = {"start_date": None, "end_date": None, "story_points": None}

        for node in nodes:
            field_name = ((node.get("field") or {}).get("name") or "").lower()

            if node.get("date"):
                if _matches(field_name, START_FIELD_PATTERNS):
                    result["start_date"] = to_utc(node["date"])
                elif _matches(field_name, END_FIELD_PATTERNS):
                    result["end_date"] = to_utc(node["date"])

            if node.get("number") is not None and _matches(field_name, POINTS_FIELD_PATTERNS):
                result["story_points"] = node["number"]

        return result
