"""Unit tests for the line-based source differ (source.py).

Tests cover:
- Normalization and line splitting
- Hunk building: leading/trailing context, folding of short runs, splitting on long runs
- Module edge cases (added, removed, absent, identical)
- Package-level filtering
- Unified diff text and one-line summaries
"""

from __future__ import annotations

import pytest

from movediff.diff.models import DiffHunk, DiffOptions, SourceDiff
from movediff.diff.source import (
    HunkBuilder,
    LineGroup,
    SourceDiffer,
    build_hunks,
    calculate_stats,
    create_source_differ,
    diff_line_groups,
    format_unified_diff,
    get_summary,
    normalize_source,
    split_lines,
)

# ============================================================================
# Fixtures
# ============================================================================


def _diff(before: str, after: str, context_lines: int = 3, **kwargs: bool) -> SourceDiff:
    differ = create_source_differ(DiffOptions(context_lines=context_lines, **kwargs))
    return differ.diff_module(before, after, "m", 1, 2)


def _text(lines: list[str]) -> str:
    return "\n".join(lines) + "\n"


def _assert_consistent(hunk: DiffHunk, old: list[str], new: list[str]) -> None:
    """Header counts agree with lines, and line numbers point at the right text."""
    assert hunk.old_lines == sum(1 for line in hunk.lines if line.type in ("context", "remove"))
    assert hunk.new_lines == sum(1 for line in hunk.lines if line.type in ("context", "add"))
    for line in hunk.lines:
        if line.type != "add":
            assert line.old_line is not None
            assert old[line.old_line - 1] == line.content
        if line.type != "remove":
            assert line.new_line is not None
            assert new[line.new_line - 1] == line.content
    old_side = [line.content for line in hunk.lines if line.type != "add"]
    new_side = [line.content for line in hunk.lines if line.type != "remove"]
    if old_side:
        assert old[hunk.old_start - 1 : hunk.old_start - 1 + hunk.old_lines] == old_side
    if new_side:
        assert new[hunk.new_start - 1 : hunk.new_start - 1 + hunk.new_lines] == new_side


# ============================================================================
# Tests: Normalization
# ============================================================================


class TestNormalization:
    """Tests for normalize_source and split_lines."""

    def test_crlf_and_cr_unified(self) -> None:
        assert normalize_source("a\r\nb\rc") == "a\nb\nc"

    def test_trailing_whitespace_stripped(self) -> None:
        assert normalize_source("a  \n\tb\t\n") == "a\n\tb\n"

    def test_final_newline_does_not_add_line(self) -> None:
        assert split_lines("a\nb\n") == ["a", "b"]
        assert split_lines("a\nb") == ["a", "b"]

    def test_blank_lines_preserved(self) -> None:
        assert split_lines("a\n\nb\n") == ["a", "", "b"]


class TestDiffLineGroups:
    """Tests for diff_line_groups."""

    def test_replace_is_removal_then_addition(self) -> None:
        groups = diff_line_groups(["a", "b", "c"], ["a", "x", "c"])
        assert groups == [
            LineGroup("unchanged", ("a",)),
            LineGroup("removed", ("b",)),
            LineGroup("added", ("x",)),
            LineGroup("unchanged", ("c",)),
        ]

    def test_ignore_whitespace_matches_stripped(self) -> None:
        groups = diff_line_groups(["  a", "b"], ["a", "b"], ignore_whitespace=True)
        assert groups == [LineGroup("unchanged", ("a", "b"))]

    def test_identical(self) -> None:
        assert diff_line_groups(["a"], ["a"]) == [LineGroup("unchanged", ("a",))]


# ============================================================================
# Tests: Hunk building
# ============================================================================


class TestHunkBuilding:
    """Hunk boundaries and context handling."""

    def test_single_replacement_with_context(self) -> None:
        """Replacing b with x under one line of context."""
        diff = _diff("a\nb\nc\n", "a\nx\nc\n", context_lines=1)

        assert len(diff.hunks) == 1
        hunk = diff.hunks[0]
        assert [(line.type, line.content) for line in hunk.lines] == [
            ("context", "a"),
            ("remove", "b"),
            ("add", "x"),
            ("context", "c"),
        ]
        assert hunk.header == "@@ -1,3 +1,3 @@"
        assert diff.stats.lines_added == 1
        assert diff.stats.lines_removed == 1
        assert diff.stats.lines_changed == 2

    def test_long_unchanged_run_splits_hunks(self) -> None:
        old = [f"l{i}" for i in range(1, 21)]
        new = list(old)
        new[1] = "X2"
        new[17] = "X18"

        diff = _diff(_text(old), _text(new), context_lines=2)

        assert [h.header for h in diff.hunks] == ["@@ -1,4 +1,4 @@", "@@ -16,5 +16,5 @@"]
        assert [line.content for line in diff.hunks[1].lines[:2]] == ["l16", "l17"]
        for hunk in diff.hunks:
            _assert_consistent(hunk, old, new)

    def test_short_unchanged_run_folded(self) -> None:
        old = ["a", "b", "c", "d", "e", "f", "g"]
        new = ["a", "B", "c", "d", "E", "f", "g"]

        diff = _diff(_text(old), _text(new), context_lines=1)

        assert len(diff.hunks) == 1
        hunk = diff.hunks[0]
        assert [line.content for line in hunk.lines] == [
            "a", "b", "B", "c", "d", "e", "E", "f", "g"
        ]
        assert hunk.header == "@@ -1,7 +1,7 @@"
        _assert_consistent(hunk, old, new)

    def test_short_final_run_folded(self) -> None:
        """A final unchanged run no longer than twice the context joins the hunk whole."""
        old = ["a", "b", "c", "d", "e"]
        new = ["z", "b", "c", "d", "e"]
        diff = _diff(_text(old), _text(new), context_lines=2)
        assert [line.content for line in diff.hunks[0].lines] == ["a", "z", "b", "c", "d", "e"]
        _assert_consistent(diff.hunks[0], old, new)

    def test_long_final_run_cut_to_trailing_context(self) -> None:
        old = ["a", "b", "c", "d", "e", "f"]
        new = ["z", "b", "c", "d", "e", "f"]
        diff = _diff(_text(old), _text(new), context_lines=2)
        assert [line.content for line in diff.hunks[0].lines] == ["a", "z", "b", "c"]
        assert diff.hunks[0].header == "@@ -1,3 +1,3 @@"

    def test_insert_at_start(self) -> None:
        old = ["a", "b"]
        new = ["z", "a", "b"]
        diff = _diff(_text(old), _text(new))
        hunk = diff.hunks[0]
        assert hunk.header == "@@ -1,2 +1,3 @@"
        _assert_consistent(hunk, old, new)

    def test_append_at_end(self) -> None:
        old = ["a"]
        new = ["a", "b"]
        diff = _diff(_text(old), _text(new))
        assert diff.hunks[0].header == "@@ -1,1 +1,2 @@"
        _assert_consistent(diff.hunks[0], old, new)

    def test_zero_context(self) -> None:
        diff = _diff("a\nb\nc\n", "a\nx\nc\n", context_lines=0)
        assert diff.hunks[0].header == "@@ -2,1 +2,1 @@"
        assert [line.type for line in diff.hunks[0].lines] == ["remove", "add"]

    @pytest.mark.parametrize(
        ("old", "new"),
        [
            (["a", "b", "c"], ["a", "c"]),
            (["a", "b", "c"], ["c", "b", "a"]),
            ([f"{i}" for i in range(30)], [f"{i}" for i in range(30) if i % 7]),
            (["x"] * 5 + ["y"], ["y"] + ["x"] * 5),
            (["fun a()", "{", "}", "fun b()", "{", "}"], ["fun b()", "{", "  x", "}"]),
        ],
    )
    def test_hunk_headers_agree_with_lines(self, old: list[str], new: list[str]) -> None:
        diff = _diff(_text(old), _text(new), context_lines=1)
        assert diff.hunks
        for hunk in diff.hunks:
            _assert_consistent(hunk, old, new)

    def test_builder_directly(self) -> None:
        builder = HunkBuilder(context_lines=1)
        builder.feed(LineGroup("added", ("new",)))
        hunks = builder.finish()
        assert len(hunks) == 1
        assert hunks[0].new_lines == 1
        assert hunks[0].old_lines == 0

    def test_build_hunks_empty(self) -> None:
        assert build_hunks([]) == []

    def test_calculate_stats(self) -> None:
        groups = diff_line_groups(["a", "b"], ["a", "c", "d"])
        stats = calculate_stats(build_hunks(groups))
        assert (stats.lines_added, stats.lines_removed) == (2, 1)


# ============================================================================
# Tests: Module edge cases
# ============================================================================


class TestDiffModule:
    """Tests for SourceDiffer.diff_module."""

    def test_identical_sources(self) -> None:
        diff = _diff("module m {}\n", "module m {}\n")
        assert diff.hunks == ()
        assert diff.stats.lines_changed == 0
        assert diff.exists_in_old is True
        assert diff.exists_in_new is True

    def test_line_endings_and_trailing_space_ignored(self) -> None:
        assert _diff("a\r\nb  \r\n", "a\nb\n").hunks == ()

    def test_leading_whitespace_counts_by_default(self) -> None:
        assert len(_diff("  a\nb\n", "a\nb\n").hunks) == 1

    def test_ignore_whitespace_option(self) -> None:
        assert _diff("  a\nb\n", "a\nb\n", ignore_whitespace=True).hunks == ()

    def test_new_module(self) -> None:
        diff = SourceDiffer().diff_module(None, "x\ny\n", "m", 1, 2)
        assert diff.exists_in_old is False
        assert diff.exists_in_new is True
        assert len(diff.hunks) == 1
        hunk = diff.hunks[0]
        assert hunk.header == "@@ -0,0 +1,2 @@"
        assert [(line.type, line.new_line) for line in hunk.lines] == [("add", 1), ("add", 2)]
        assert diff.stats.lines_added == 2
        assert diff.stats.lines_removed == 0

    def test_removed_module(self) -> None:
        diff = SourceDiffer().diff_module("x\ny\nz", "", "m", 1, 2)
        assert diff.exists_in_old is True
        assert diff.exists_in_new is False
        hunk = diff.hunks[0]
        assert hunk.header == "@@ -1,3 +0,0 @@"
        assert all(line.type == "remove" and line.new_line is None for line in hunk.lines)
        assert diff.stats.lines_removed == 3

    def test_absent_on_both_sides(self) -> None:
        diff = SourceDiffer().diff_module(None, None, "m", 1, 2)
        assert diff.hunks == ()
        assert diff.exists_in_old is False
        assert diff.exists_in_new is False

    def test_versions_carried(self) -> None:
        diff = SourceDiffer().diff_module("a", "b", "coin", 4, 7)
        assert (diff.module_name, diff.from_version, diff.to_version) == ("coin", 4, 7)


class TestDiffPackage:
    """Tests for SourceDiffer.diff_package."""

    BEFORE = {"b": "1\n", "a": "1\n", "gone": "x\n"}
    AFTER = {"a": "2\n", "b": "1\n", "new": "y\n"}

    def test_all_modules_sorted(self) -> None:
        diffs = SourceDiffer().diff_package(self.BEFORE, self.AFTER, 1, 2)
        assert list(diffs) == ["a", "b", "gone", "new"]
        assert diffs["gone"].exists_in_new is False
        assert diffs["new"].exists_in_old is False
        assert diffs["b"].hunks == ()

    def test_explicit_module_filter(self) -> None:
        diffs = SourceDiffer().diff_package(self.BEFORE, self.AFTER, 1, 2, modules=["new", "a"])
        assert list(diffs) == ["a", "new"]

    def test_filter_from_options(self) -> None:
        differ = SourceDiffer(DiffOptions(modules=frozenset({"b"})))
        assert list(differ.diff_package(self.BEFORE, self.AFTER, 1, 2)) == ["b"]

    def test_explicit_filter_overrides_options(self) -> None:
        differ = SourceDiffer(DiffOptions(modules=frozenset({"b"})))
        diffs = differ.diff_package(self.BEFORE, self.AFTER, 1, 2, modules=["a"])
        assert list(diffs) == ["a"]


# ============================================================================
# Tests: Text output
# ============================================================================


class TestFormatUnifiedDiff:
    """Tests for format_unified_diff."""

    def test_default_names(self) -> None:
        diff = _diff("a\nb\nc\n", "a\nx\nc\n", context_lines=1)
        assert format_unified_diff(diff) == "\n".join(
            ["--- a/m.move", "+++ b/m.move", "@@ -1,3 +1,3 @@", " a", "-b", "+x", " c"]
        )

    def test_custom_names(self) -> None:
        diff = _diff("a\n", "b\n")
        text = format_unified_diff(diff, "v1/m.move", "v2/m.move")
        assert text.startswith("--- v1/m.move\n+++ v2/m.move\n")

    def test_no_hunks_only_headers(self) -> None:
        assert format_unified_diff(_diff("a\n", "a\n")) == "--- a/m.move\n+++ b/m.move"


class TestGetSummary:
    """Tests for get_summary."""

    def test_new_module(self) -> None:
        diff = SourceDiffer().diff_module("", "a\nb\n", "pool", 1, 2)
        assert get_summary(diff) == "[+] New module: pool (+2 lines)"

    def test_removed_module(self) -> None:
        diff = SourceDiffer().diff_module("a\n", None, "pool", 1, 2)
        assert get_summary(diff) == "[-] Removed module: pool (-1 lines)"

    def test_unchanged(self) -> None:
        assert get_summary(_diff("a\n", "a\n")) == "[ ] No changes: m"

    def test_modified(self) -> None:
        assert get_summary(_diff("a\nb\n", "a\nc\nd\n")) == "[~] Modified: m (+2/-1)"
