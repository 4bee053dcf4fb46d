"""Dependency extraction from free-text issue bodies.

Recognized forms (case-insensitive):

    depends on #12          blocked by #12          depends on: #1, #2
    depends on https://github.com/owner/repo/issues/12
    finish-to-start: #12    start-to-start: #12
    finish-to-finish: #12   start-to-finish: #12

Text inside fenced blocks, inline code spans and indented code lines is
ignored. Every call is independent; patterns are compiled once and never
carry match state between calls.
"""

import re

from gantry.models.tasks import Dependency, RelationType

DEPENDS_ON_PATTERN = re.compile(r"depends?\s+on:?\s*#(\d+)", re.IGNORECASE)
BLOCKED_BY_PATTERN = re.compile(r"blocked\s+by:?\s*#(\d+)", re.IGNORECASE)
GITHUB_URL_PATTERN = re.compile(
    r"depends?\s+on:?\s+https://github\.com/[\w.-]+/[\w.-]+/issues/(\d+)",
    re.IGNORECASE,
)

# Order matters: earlier patterns win when the same issue is tagged twice
TYPED_PATTERNS: tuple[tuple[RelationType, re.Pattern[str]], ...] = tuple(
    (relation, re.compile(rf"{relation.value}:?\s*#(\d+)", re.IGNORECASE))
    for relation in (
        RelationType.FINISH_TO_START,
        RelationType.START_TO_START,
        RelationType.FINISH_TO_FINISH,
        RelationType.START_TO_FINISH,
    )
)

FENCED_BLOCK_PATTERN = re.compile(r"```.*?```", re.DOTALL)
INLINE_CODE_PATTERN = re.compile(r"`[^`\n]*`")
KEYWORD_PATTERN = re.compile(
    r"depends?\s+on|blocked\s+by|finish-to-start|start-to-start|finish-to-finish|start-to-finish",
    re.IGNORECASE,
)
ISSUE_LIST_PATTERN = re.compile(
    r"(depends?\s+on|blocked\s+by):?\s*(#\d+(?:\s*,\s*#\d+)*)",
    re.IGNORECASE,
)
CODE_INDENT = "    "


def strip_code(text: str) -> str:
    """Remove code so quoted snippets do not produce false dependencies.

    Fenced blocks and inline spans are dropped outright. Indented lines are
    dropped only when they carry no dependency keyword.
    """
    text = FENCED_BLOCK_PATTERN.sub("", text)
    text = INLINE_CODE_PATTERN.sub("", text)
    lines = [
        line
        for line in text.split("\n")
        if not line.startswith(CODE_INDENT) or KEYWORD_PATTERN.search(line)
    ]
    return "\n".join(lines)


def expand_issue_lists(text: str) -> str:
    """Rewrite ``depends on: #1, #2`` as ``depends on #1 depends on #2``."""

    def _expand(match: re.Match[str]) -> str:
        prefix = match.group(1)
        issues = [issue.strip() for issue in match.group(2).split(",")]
        return " ".join(f"{prefix} {issue}" for issue in issues)

    return ISSUE_LIST_PATTERN.sub(_expand, text)


def _collect(
    text: str,
    pattern: re.Pattern[str],
    relation: RelationType,
    found: list[Dependency],
    seen: set[str],
) -> None:
    for match in pattern.finditer(text):
        target_id = match.group(1)
        if target_id in seen:
            continue
        seen.add(target_id)
        found.append(Dependency(type=relation, target_id=target_id))


def extract_dependencies(text: str | None) -> list[Dependency]:
    """Extract finish-to-start dependencies from ``depends on``/``blocked by`` text.

    Each target issue is reported once; the first match in scan order wins
    (``depends on``, then ``blocked by``, then issue URLs).

    Args:
        text: Free-text issue body (None or empty yields no dependencies)

    Returns:
        Dependencies in discovery order
    """
    if not text:
        return []

    expanded = expand_issue_lists(strip_code(text))
    found: list[Dependency] = []
    seen: set[str] = set()
    for pattern in (DEPENDS_ON_PATTERN, BLOCKED_BY_PATTERN, GITHUB_URL_PATTERN):
        _collect(expanded, pattern, RelationType.FINISH_TO_START, found, seen)
    return found


def extract_typed_dependencies(text: str | None) -> list[Dependency]:
    """Extract dependencies including explicit relation-type tags.

    Tagged references (``start-to-start: #4``) are collected first, in
    relation order; plain ``depends on``/``blocked by`` references not
    already captured follow as finish-to-start.

    Args:
        text: Free-text issue body (None or empty yields no dependencies)

    Returns:
        Dependencies in discovery order
    """
    if not text:
        return []

    cleaned = strip_code(text)
    found: list[Dependency] = []
    seen: set[str] = set()
    for relation, pattern in TYPED_PATTERNS:
        _collect(cleaned, pattern, relation, found, seen)

    for dependency in extract_dependencies(text):
        if dependency.target_id not in seen:
            seen.add(dependency.target_id)
            found.append(dependency)
    return found
