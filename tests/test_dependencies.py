"""Tests for dependency extraction from issue text."""

from gantry.models.tasks import Dependency, RelationType
from gantry.scheduling.dependencies import (
    expand_issue_lists,
    extract_dependencies,
    extract_typed_dependencies,
    strip_code,
)

FTS = RelationType.FINISH_TO_START


def pairs(dependencies: list[Dependency]) -> list[tuple[str, str]]:
    return [(dep.type.value, dep.target_id) for dep in dependencies]


class TestExtractDependencies:
    """Tests for the basic extractor."""

    def test_depends_on_and_blocked_by(self) -> None:
        """Both keyword forms produce finish-to-start edges."""
        deps = extract_dependencies("This task depends on #123 and is blocked by #456")
        assert deps == [
            Dependency(type=FTS, target_id="123"),
            Dependency(type=FTS, target_id="456"),
        ]

    def test_ignores_fenced_code(self) -> None:
        """References inside fenced blocks are not dependencies."""
        text = "Setup:\n```\ndepends on #999\n```\nThis depends on #123"
        assert [d.target_id for d in extract_dependencies(text)] == ["123"]

    def test_ignores_inline_code(self) -> None:
        """References inside inline code spans are not dependencies."""
        text = "Use `depends on #5` syntax. Actually depends on #6"
        assert [d.target_id for d in extract_dependencies(text)] == ["6"]

    def test_comma_separated_list(self) -> None:
        """A list after the keyword yields one edge per issue."""
        deps = extract_dependencies("depends on: #1, #2,#3")
        assert [d.target_id for d in deps] == ["1", "2", "3"]

    def test_blocked_by_list(self) -> None:
        """Blocked-by lists expand too."""
        deps = extract_dependencies("Blocked by: #4, #5")
        assert [d.target_id for d in deps] == ["4", "5"]

    def test_github_issue_url(self) -> None:
        """Issue URLs after depends on are recognized."""
        deps = extract_dependencies("depends on https://github.com/acme/web-app/issues/42")
        assert pairs(deps) == [("finish-to-start", "42")]

    def test_case_insensitive(self) -> None:
        """Keywords match regardless of case."""
        assert [d.target_id for d in extract_dependencies("Depends On #9")] == ["9"]
        assert [d.target_id for d in extract_dependencies("BLOCKED BY #8")] == ["8"]

    def test_singular_depend(self) -> None:
        """'depend on' is accepted as well as 'depends on'."""
        assert [d.target_id for d in extract_dependencies("we depend on #3")] == ["3"]

    def test_duplicates_recorded_once(self) -> None:
        """The same target is reported only once."""
        deps = extract_dependencies("depends on #1, blocked by #1, depends on #1")
        assert [d.target_id for d in deps] == ["1"]

    def test_scan_order_depends_on_first(self) -> None:
        """depends-on matches are collected before blocked-by matches."""
        deps = extract_dependencies("blocked by #2, later depends on #1")
        assert [d.target_id for d in deps] == ["1", "2"]

    def test_empty_text(self) -> None:
        """Empty or missing text has no dependencies."""
        assert extract_dependencies("") == []
        assert extract_dependencies(None) == []

    def test_plain_issue_reference_is_not_a_dependency(self) -> None:
        """A bare #N mention is only a reference."""
        assert extract_dependencies("Related to #7, see #8") == []

    def test_repeated_calls_are_independent(self) -> None:
        """No scanner state leaks between calls."""
        text = "depends on #1 blocked by #2"
        assert extract_dependencies(text) == extract_dependencies(text)


class TestExtractTypedDependencies:
    """Tests for the typed extractor."""

    def test_relation_tags(self) -> None:
        """Each tag maps to its relation type; plain forms fall back to finish-to-start."""
        text = "start-to-start: #10\nfinish-to-finish #11\ndepends on #12"
        assert pairs(extract_typed_dependencies(text)) == [
            ("start-to-start", "10"),
            ("finish-to-finish", "11"),
            ("finish-to-start", "12"),
        ]

    def test_tag_order_wins_over_text_order(self) -> None:
        """Tags are collected in relation order, not text order."""
        text = "start-to-finish: #3 then finish-to-start: #4"
        assert pairs(extract_typed_dependencies(text)) == [
            ("finish-to-start", "4"),
            ("start-to-finish", "3"),
        ]

    def test_tag_beats_plain_reference(self) -> None:
        """A tagged target is not repeated by the fallback."""
        text = "start-to-start: #5 but also depends on #5"
        assert pairs(extract_typed_dependencies(text)) == [("start-to-start", "5")]

    def test_tags_in_code_are_ignored(self) -> None:
        """Code stripping applies to tags as well."""
        text = "```\nstart-to-start: #1\n```\nfinish-to-finish: #2"
        assert pairs(extract_typed_dependencies(text)) == [("finish-to-finish", "2")]

    def test_superset_of_basic(self) -> None:
        """Untagged text gives the same result as the basic extractor."""
        text = "depends on: #1, #2 and blocked by #3"
        assert extract_typed_dependencies(text) == extract_dependencies(text)

    def test_empty_text(self) -> None:
        """Empty or missing text has no dependencies."""
        assert extract_typed_dependencies(None) == []


class TestPreprocessing:
    """Tests for code stripping and list expansion."""

    def test_indented_code_dropped(self) -> None:
        """Indented lines without keywords are treated as code."""
        assert strip_code("keep\n    x = compute(#3)\nafter") == "keep\nafter"

    def test_indented_keyword_line_kept(self) -> None:
        """Indented lines that declare a dependency survive."""
        text = "keep\n    depends on #3"
        assert strip_code(text) == text
        assert [d.target_id for d in extract_dependencies(text)] == ["3"]

    def test_expand_issue_lists(self) -> None:
        """Lists are rewritten as repeated keyword references."""
        assert expand_issue_lists("depends on: #1, #2") == "depends on #1 depends on #2"
