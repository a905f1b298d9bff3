"""Line-based source diff for module source text.

Produces unified-diff style hunks with bounded context.  Lines are
matched with difflib's SequenceMatcher; the resulting opcode stream is
folded into hunks by a small two-state builder (no open hunk / open hunk).
"""

from __future__ import annotations

import difflib
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Literal

from movediff.core.logging import get_logger
from movediff.diff.models import (
    DiffHunk,
    DiffLine,
    DiffOptions,
    LineType,
    SourceDiff,
    SourceDiffStats,
)

log = get_logger(__name__)

DEFAULT_CONTEXT_LINES = 3

_LINE_BREAK = re.compile(r"\r\n?")

GroupKind = Literal["added", "removed", "unchanged"]


@dataclass(frozen=True, slots=True)
class LineGroup:
    """A run of lines that were all added, all removed, or all unchanged."""

    kind: GroupKind
    lines: tuple[str, ...]


def normalize_source(source: str) -> str:
    """Unify line endings to ``\\n`` and strip trailing whitespace per line."""
    unified = _LINE_BREAK.sub("\n", source)
    return "\n".join(line.rstrip() for line in unified.split("\n"))


def split_lines(source: str) -> list[str]:
    """Split into lines; a final newline terminates the last line."""
    lines = source.split("\n")
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()
    return lines


def diff_line_groups(
    old_lines: list[str],
    new_lines: list[str],
    *,
    ignore_whitespace: bool = False,
) -> list[LineGroup]:
    """Line-level diff as an ordered stream of added/removed/unchanged groups.

    With ``ignore_whitespace`` lines are matched on their stripped text;
    unchanged groups carry the new-side content.
    """
    if ignore_whitespace:
        old_keys = [line.strip() for line in old_lines]
        new_keys = [line.strip() for line in new_lines]
    else:
        old_keys, new_keys = old_lines, new_lines

    matcher = difflib.SequenceMatcher(None, old_keys, new_keys, autojunk=False)
    groups: list[LineGroup] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            groups.append(LineGroup("unchanged", tuple(new_lines[j1:j2])))
            continue
        # replace = removal followed by insertion
        if tag in ("delete", "replace"):
            groups.append(LineGroup("removed", tuple(old_lines[i1:i2])))
        if tag in ("insert", "replace"):
            groups.append(LineGroup("added", tuple(new_lines[j1:j2])))
    return groups


@dataclass
class _OpenHunk:
    old_start: int
    new_start: int
    lines: list[DiffLine] = field(default_factory=list)

    def close(self) -> DiffHunk:
        old_count = sum(1 for line in self.lines if line.type != "add")
        new_count = sum(1 for line in self.lines if line.type != "remove")
        return DiffHunk(
            old_start=self.old_start,
            old_lines=old_count,
            new_start=self.new_start,
            new_lines=new_count,
            lines=tuple(self.lines),
        )


class HunkBuilder:
    """Folds a line-group stream into hunks.

    States: no open hunk (``_open is None``) or an open hunk.

    - changed group, no open hunk: open one, seeded with up to
      ``context_lines`` leading context lines from the preceding run.
    - changed group, open hunk: append.
    - unchanged run, open hunk: append up to ``context_lines`` trailing
      context; if the run is longer than twice that, close the hunk and
      keep the run's tail as leading context for the next one, otherwise
      fold the whole run in.
    - unchanged run, no open hunk: advance cursors, remember the tail.
    """

    def __init__(self, context_lines: int = DEFAULT_CONTEXT_LINES) -> None:
        self._context = context_lines
        self._open: _OpenHunk | None = None
        self._hunks: list[DiffHunk] = []
        self._old = 1
        self._new = 1
        self._leading: list[DiffLine] = []

    def feed(self, group: LineGroup) -> None:
        if group.kind == "unchanged":
            self._feed_unchanged(group.lines)
        else:
            self._feed_changed(group.kind, group.lines)

    def finish(self) -> list[DiffHunk]:
        if self._open is not None:
            self._hunks.append(self._open.close())
            self._open = None
        return self._hunks

    def _context_line(self, content: str, offset: int) -> DiffLine:
        return DiffLine(
            type="context",
            content=content,
            old_line=self._old + offset,
            new_line=self._new + offset,
        )

    def _feed_changed(self, kind: GroupKind, lines: Iterable[str]) -> None:
        if self._open is None:
            # Leading context ends right before the cursors
            back = len(self._leading)
            self._open = _OpenHunk(self._old - back, self._new - back, list(self._leading))
            self._leading = []

        line_type: LineType = "add" if kind == "added" else "remove"
        for content in lines:
            if line_type == "add":
                self._open.lines.append(DiffLine("add", content, new_line=self._new))
                self._new += 1
            else:
                self._open.lines.append(DiffLine("remove", content, old_line=self._old))
                self._old += 1

    def _feed_unchanged(self, lines: tuple[str, ...]) -> None:
        count = len(lines)
        ctx = self._context

        if self._open is None:
            tail_start = max(count - ctx, 0)
            self._leading = [
                self._context_line(lines[i], i) for i in range(tail_start, count)
            ]
        else:
            trailing = min(count, ctx)
            for i in range(trailing):
                self._open.lines.append(self._context_line(lines[i], i))

            if count > ctx * 2:
                self._hunks.append(self._open.close())
                self._open = None
                tail_start = max(count - ctx, trailing)
                self._leading = [
                    self._context_line(lines[i], i) for i in range(tail_start, count)
                ]
            else:
                for i in range(trailing, count):
                    self._open.lines.append(self._context_line(lines[i], i))

        self._old += count
        self._new += count


def build_hunks(
    groups: list[LineGroup], context_lines: int = DEFAULT_CONTEXT_LINES
) -> list[DiffHunk]:
    builder = HunkBuilder(context_lines)
    for group in groups:
        builder.feed(group)
    return builder.finish()


def calculate_stats(hunks: Iterable[DiffHunk]) -> SourceDiffStats:
    added = 0
    removed = 0
    for hunk in hunks:
        for line in hunk.lines:
            if line.type == "add":
                added += 1
            elif line.type == "remove":
                removed += 1
    return SourceDiffStats(lines_added=added, lines_removed=removed)


class SourceDiffer:
    """Source-level differ for one or many modules."""

    def __init__(self, options: DiffOptions | None = None) -> None:
        self.options = options or DiffOptions()

    def diff_module(
        self,
        before_source: str | None,
        after_source: str | None,
        module_name: str,
        from_version: int,
        to_version: int,
    ) -> SourceDiff:
        """Compare two source texts of one module.

        Absent (None) and empty sources are treated alike.
        """
        before_source = before_source or ""
        after_source = after_source or ""
        exists_in_old = len(before_source) > 0
        exists_in_new = len(after_source) > 0

        if not exists_in_old and not exists_in_new:
            return SourceDiff(
                module_name=module_name, from_version=from_version, to_version=to_version
            )

        if not exists_in_old:
            return self._whole_file_diff(after_source, "add", module_name, from_version, to_version)

        if not exists_in_new:
            return self._whole_file_diff(
                before_source, "remove", module_name, from_version, to_version
            )

        old_lines = split_lines(normalize_source(before_source))
        new_lines = split_lines(normalize_source(after_source))
        groups = diff_line_groups(
            old_lines, new_lines, ignore_whitespace=self.options.ignore_whitespace
        )
        hunks = build_hunks(groups, self.options.context_lines)
        stats = calculate_stats(hunks)

        log.debug(
            "source_diff_complete",
            module=module_name,
            hunks=len(hunks),
            lines_added=stats.lines_added,
            lines_removed=stats.lines_removed,
        )

        return SourceDiff(
            module_name=module_name,
            from_version=from_version,
            to_version=to_version,
            hunks=tuple(hunks),
            stats=stats,
            exists_in_old=True,
            exists_in_new=True,
        )

    def diff_package(
        self,
        before_sources: Mapping[str, str],
        after_sources: Mapping[str, str],
        from_version: int,
        to_version: int,
        modules: Iterable[str] | None = None,
    ) -> dict[str, SourceDiff]:
        """Diff every module in either snapshot, optionally restricted to ``modules``.

        ``modules`` falls back to ``options.modules`` when not given.
        """
        selected = modules if modules is not None else self.options.modules
        wanted = set(selected) if selected is not None else None

        result: dict[str, SourceDiff] = {}
        for module_name in sorted(set(before_sources) | set(after_sources)):
            if wanted is not None and module_name not in wanted:
                continue
            result[module_name] = self.diff_module(
                before_sources.get(module_name, ""),
                after_sources.get(module_name, ""),
                module_name,
                from_version,
                to_version,
            )
        return result

    def _whole_file_diff(
        self,
        source: str,
        line_type: LineType,
        module_name: str,
        from_version: int,
        to_version: int,
    ) -> SourceDiff:
        """Single hunk covering an entirely added or removed module."""
        lines = split_lines(normalize_source(source))
        count = len(lines)
        if line_type == "add":
            diff_lines = tuple(DiffLine("add", c, new_line=i + 1) for i, c in enumerate(lines))
            hunk = DiffHunk(
                old_start=0, old_lines=0, new_start=1, new_lines=count, lines=diff_lines
            )
            stats = SourceDiffStats(lines_added=count)
        else:
            diff_lines = tuple(DiffLine("remove", c, old_line=i + 1) for i, c in enumerate(lines))
            hunk = DiffHunk(
                old_start=1, old_lines=count, new_start=0, new_lines=0, lines=diff_lines
            )
            stats = SourceDiffStats(lines_removed=count)

        return SourceDiff(
            module_name=module_name,
            from_version=from_version,
            to_version=to_version,
            hunks=(hunk,),
            stats=stats,
            exists_in_old=line_type == "remove",
            exists_in_new=line_type == "add",
        )


_PREFIX: dict[str, str] = {"add": "+", "remove": "-", "context": " "}


def format_unified_diff(
    diff: SourceDiff,
    before_name: str | None = None,
    after_name: str | None = None,
) -> str:
    """Render a SourceDiff as unified diff text."""
    out = [
        f"--- {before_name or f'a/{diff.module_name}.move'}",
        f"+++ {after_name or f'b/{diff.module_name}.move'}",
    ]
    for hunk in diff.hunks:
        out.append(hunk.header)
        out.extend(f"{_PREFIX[line.type]}{line.content}" for line in hunk.lines)
    return "\n".join(out)


def get_summary(diff: SourceDiff) -> str:
    """One-line status for a module's source diff."""
    stats = diff.stats
    if not diff.exists_in_old and diff.exists_in_new:
        return f"[+] New module: {diff.module_name} (+{stats.lines_added} lines)"
    if diff.exists_in_old and not diff.exists_in_new:
        return f"[-] Removed module: {diff.module_name} (-{stats.lines_removed} lines)"
    if stats.lines_changed == 0:
        return f"[ ] No changes: {diff.module_name}"
    return f"[~] Modified: {diff.module_name} (+{stats.lines_added}/-{stats.lines_removed})"


def create_source_differ(options: DiffOptions | None = None) -> SourceDiffer:
    return SourceDiffer(options)
