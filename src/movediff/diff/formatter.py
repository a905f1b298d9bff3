"""Render diff results for terminals, markdown and JSON.

Terminal output is built from rich Text objects and rendered through a
private Console, so ``colors=False`` yields the same text without styles.
"""

from __future__ import annotations

import io
import json
from collections.abc import Mapping

from rich.console import Console
from rich.text import Text

from movediff.config.models import FormatConfig
from movediff.diff.models import (
    ABIChange,
    ChangeRisk,
    ChangeType,
    PackageComparison,
    SourceDiff,
    StructuralDiff,
)

_TYPE_ICON = {ChangeType.ADDED: "+", ChangeType.REMOVED: "-", ChangeType.MODIFIED: "~"}
_TYPE_STYLE = {ChangeType.ADDED: "green", ChangeType.REMOVED: "red", ChangeType.MODIFIED: "yellow"}
_MD_ICON = {ChangeType.ADDED: "➕", ChangeType.REMOVED: "➖", ChangeType.MODIFIED: "🔄"}


class DiffFormatter:
    """Formats structural and source diffs."""

    def __init__(self, *, colors: bool = True, width: int = 120) -> None:
        self.colors = colors
        self.width = width

    def _render(self, lines: list[Text]) -> str:
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            force_terminal=self.colors,
            color_system="standard" if self.colors else None,
            width=self.width,
            highlight=False,
            emoji=False,
        )
        for line in lines:
            console.print(line, soft_wrap=True)
        return buffer.getvalue().rstrip("\n")

    # ------------------------------------------------------------------
    # Structural
    # ------------------------------------------------------------------

    def format_structural_diff_table(self, diff: StructuralDiff) -> str:
        summary = diff.summary
        lines = [
            Text("=== Structural Changes ===", style="bold"),
            Text.assemble(("Version", "cyan"), f" {diff.from_version} → {diff.to_version}"),
            Text(""),
            Text("Summary:", style="bold"),
        ]
        if summary.breaking_changes:
            lines.append(Text("  ⚠️  Breaking changes detected!", style="red"))
        lines.append(
            Text.assemble(
                "  Functions: ",
                self._change_counts(
                    summary.functions_added, summary.functions_removed, summary.functions_modified
                ),
            )
        )
        lines.append(
            Text.assemble(
                "  Structs:   ",
                self._change_counts(
                    summary.structs_added, summary.structs_removed, summary.structs_modified
                ),
            )
        )
        if summary.modules_added or summary.modules_removed:
            lines.append(
                Text.assemble(
                    "  Modules:   ",
                    self._change_counts(summary.modules_added, summary.modules_removed, 0),
                )
            )
        lines.append(Text(f"  Total:     {summary.total_changes} change(s)"))
        lines.append(Text(""))

        if diff.changes_by_module:
            lines.append(Text("Details:", style="bold"))
            for module_name, changes in diff.changes_by_module.items():
                lines.append(Text(""))
                lines.append(Text(f"  Module: {module_name}", style="cyan"))
                lines.extend(self._change_line(c, "    ") for c in changes)
        elif diff.changes:
            lines.append(Text("Changes:", style="bold"))
            lines.extend(self._change_line(c, "  ") for c in diff.changes)
        else:
            lines.append(Text("  No structural changes detected.", style="dim"))

        return self._render(lines)

    def _change_line(self, change: ABIChange, indent: str) -> Text:
        line = Text.assemble(
            (f"{indent}[{_TYPE_ICON[change.type]}]", _TYPE_STYLE[change.type]),
            f" {change.category.value}: {change.name}",
        )
        if change.risk == ChangeRisk.BREAKING:
            line.append(" [BREAKING]", style="red")
        return line

    def _change_counts(self, added: int, removed: int, modified: int) -> Text:
        parts: list[tuple[str, str]] = []
        if added:
            parts.append((f"+{added}", "green"))
        if removed:
            parts.append((f"-{removed}", "red"))
        if modified:
            parts.append((f"~{modified}", "yellow"))
        if not parts:
            return Text("no changes", style="dim")
        return Text(" / ").join(Text(text, style=style) for text, style in parts)

    def format_structural_diff_markdown(self, diff: StructuralDiff) -> str:
        summary = diff.summary
        lines = [
            f"## Structural Changes (v{diff.from_version} → v{diff.to_version})",
            "",
            "### Summary",
            "",
            "| Category | Added | Removed | Modified |",
            "|----------|-------|---------|----------|",
            f"| Functions | {summary.functions_added} | {summary.functions_removed} "
            f"| {summary.functions_modified} |",
            f"| Structs | {summary.structs_added} | {summary.structs_removed} "
            f"| {summary.structs_modified} |",
            f"| Modules | {summary.modules_added} | {summary.modules_removed} | - |",
            "",
        ]
        if summary.breaking_changes:
            lines.extend(["> ⚠️ **Breaking changes detected**", ""])

        if diff.changes_by_module:
            lines.extend(["### Changes by Module", ""])
            for module_name, changes in diff.changes_by_module.items():
                lines.extend([f"#### `{module_name}`", ""])
                for change in changes:
                    risk = " **[BREAKING]**" if change.risk == ChangeRisk.BREAKING else ""
                    lines.append(
                        f"- {_MD_ICON[change.type]} {change.category.value}: "
                        f"`{change.name}`{risk}"
                    )
                    if change.details is not None:
                        lines.extend(f"  - {detail}" for detail in change.details.changes)
                lines.append("")

        return "\n".join(lines)

    def format_brief_summary(self, diff: StructuralDiff) -> str:
        summary = diff.summary
        counts = [
            (summary.functions_added, "+", "fn"),
            (summary.functions_removed, "-", "fn"),
            (summary.functions_modified, "~", "fn"),
            (summary.structs_added, "+", "struct"),
            (summary.structs_removed, "-", "struct"),
            (summary.structs_modified, "~", "struct"),
            (summary.modules_added, "+", "module"),
            (summary.modules_removed, "-", "module"),
        ]
        parts = [f"{sign}{n} {label}" for n, sign, label in counts if n > 0]
        if not parts:
            return "No changes"

        line = Text(", ".join(parts))
        if summary.breaking_changes:
            line.append(" (breaking)", style="red")
        return self._render([line])

    # ------------------------------------------------------------------
    # Source
    # ------------------------------------------------------------------

    def format_source_diff_summary(self, diffs: Mapping[str, SourceDiff]) -> str:
        lines = [Text("=== Source Changes ===", style="bold"), Text("")]
        if not diffs:
            lines.append(Text("  No source changes.", style="dim"))
            return self._render(lines)

        for module_name in sorted(diffs):
            diff = diffs[module_name]
            stats = diff.stats
            if not diff.exists_in_old and diff.exists_in_new:
                icon, style, status = "+", "green", f"new (+{stats.lines_added} lines)"
            elif diff.exists_in_old and not diff.exists_in_new:
                icon, style, status = "-", "red", f"removed (-{stats.lines_removed} lines)"
            elif stats.lines_changed == 0:
                icon, style, status = " ", "dim", "unchanged"
            else:
                icon, style, status = "~", "yellow", f"+{stats.lines_added}/-{stats.lines_removed}"
            lines.append(
                Text.assemble("  ", (f"[{icon}]", style), f" {module_name}: {status}")
            )
        return self._render(lines)

    def format_source_diff(self, diff: SourceDiff) -> str:
        """Styled hunk-by-hunk rendering of one module's source diff."""
        lines = [
            Text(f"=== {diff.module_name} ===", style="cyan"),
            Text(f"Version {diff.from_version} → {diff.to_version}", style="cyan"),
            Text(""),
        ]
        if not diff.hunks:
            lines.append(Text("(no changes)"))
            return self._render(lines)

        for hunk in diff.hunks:
            lines.append(Text(hunk.header, style="cyan"))
            for line in hunk.lines:
                if line.type == "add":
                    lines.append(Text(f"+{line.content}", style="green"))
                elif line.type == "remove":
                    lines.append(Text(f"-{line.content}", style="red"))
                else:
                    lines.append(Text(f" {line.content}"))
            lines.append(Text(""))
        return self._render(lines)

    # ------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------

    def format_comparison_json(self, comparison: PackageComparison) -> str:
        return json.dumps(comparison.to_dict(), indent=2, ensure_ascii=False)


def create_diff_formatter(
    config: FormatConfig | None = None,
    *,
    colors: bool | None = None,
    width: int | None = None,
) -> DiffFormatter:
    """Build a formatter from the ``format`` config section.

    Explicit ``colors``/``width`` win over the config values.
    """
    config = config or FormatConfig()
    return DiffFormatter(
        colors=config.colors if colors is None else colors,
        width=config.width if width is None else width,
    )
