"""Data models for package version comparison.

All models are frozen dataclasses, with no coupling to how interfaces or
sources were fetched.  ``to_dict()`` produces the JSON shape consumed by
UI and analysis layers (camelCase keys).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Literal


class Visibility(str, Enum):
    PUBLIC = "Public"
    PRIVATE = "Private"
    FRIEND = "Friend"


class Ability(str, Enum):
    COPY = "Copy"
    DROP = "Drop"
    STORE = "Store"
    KEY = "Key"


# Canonical display order for ability sets
ABILITY_ORDER: tuple[Ability, ...] = (Ability.COPY, Ability.DROP, Ability.STORE, Ability.KEY)


def sorted_abilities(abilities: frozenset[Ability]) -> list[Ability]:
    return [a for a in ABILITY_ORDER if a in abilities]


PRIMITIVE_NAMES: frozenset[str] = frozenset(
    {"Bool", "U8", "U16", "U32", "U64", "U128", "U256", "Address", "Signer"}
)


# ---------------------------------------------------------------------------
# Type expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Primitive:
    name: str


@dataclass(frozen=True, slots=True)
class Vector:
    element: TypeExpr


@dataclass(frozen=True, slots=True)
class StructRef:
    """Reference to a struct type, with generic instantiation in order."""

    address: str
    module: str
    name: str
    type_arguments: tuple[TypeExpr, ...] = ()


@dataclass(frozen=True, slots=True)
class TypeParameter:
    index: int


@dataclass(frozen=True, slots=True)
class Reference:
    inner: TypeExpr


@dataclass(frozen=True, slots=True)
class MutableReference:
    inner: TypeExpr


TypeExpr = Primitive | Vector | StructRef | TypeParameter | Reference | MutableReference

TYPE_EXPR_CLASSES: tuple[type, ...] = (
    Primitive,
    Vector,
    StructRef,
    TypeParameter,
    Reference,
    MutableReference,
)


# ---------------------------------------------------------------------------
# Module interfaces
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FunctionInterface:
    """Normalized function signature.  No body."""

    name: str
    visibility: Visibility
    is_entry: bool = False
    type_parameters: tuple[frozenset[Ability], ...] = ()  # constraint set per param
    parameters: tuple[TypeExpr, ...] = ()
    returns: tuple[TypeExpr, ...] = ()


@dataclass(frozen=True, slots=True)
class StructTypeParameter:
    constraints: frozenset[Ability] = frozenset()
    is_phantom: bool = False


@dataclass(frozen=True, slots=True)
class FieldInterface:
    name: str
    type: TypeExpr


@dataclass(frozen=True, slots=True)
class StructInterface:
    """Normalized struct definition.

    Field order is layout-significant but changes are detected by name.
    """

    name: str
    abilities: frozenset[Ability] = frozenset()
    type_parameters: tuple[StructTypeParameter, ...] = ()
    fields: tuple[FieldInterface, ...] = ()


@dataclass(frozen=True, slots=True)
class ModuleInterface:
    """The callable/visible surface of one compiled module."""

    name: str
    functions: dict[str, FunctionInterface] = field(default_factory=dict)
    structs: dict[str, StructInterface] = field(default_factory=dict)
    address: str | None = None


# ---------------------------------------------------------------------------
# Structural diff output
# ---------------------------------------------------------------------------


class ChangeType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class ChangeCategory(str, Enum):
    FUNCTION = "function"
    STRUCT = "struct"
    FIELD = "field"
    TYPE_PARAM = "type_param"
    MODULE = "module"


class ChangeRisk(str, Enum):
    BREAKING = "breaking"
    NON_BREAKING = "non_breaking"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ChangeDetails:
    changes: tuple[str, ...] = ()
    before: str | None = None
    after: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"changes": list(self.changes)}
        if self.before is not None:
            result["before"] = self.before
        if self.after is not None:
            result["after"] = self.after
        return result


@dataclass(frozen=True, slots=True)
class ABIChange:
    """A single interface change between two versions."""

    type: ChangeType
    category: ChangeCategory
    name: str
    risk: ChangeRisk
    description: str
    module_name: str | None = None
    details: ChangeDetails | None = None

    @property
    def is_breaking(self) -> bool:
        return self.risk == ChangeRisk.BREAKING

    def with_module(self, module_name: str) -> ABIChange:
        return replace(self, module_name=module_name)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": self.type.value,
            "category": self.category.value,
            "name": self.name,
        }
        if self.module_name is not None:
            result["moduleName"] = self.module_name
        result["risk"] = self.risk.value
        result["description"] = self.description
        if self.details is not None:
            result["details"] = self.details.to_dict()
        return result


@dataclass(frozen=True, slots=True)
class StructuralDiffSummary:
    functions_added: int = 0
    functions_removed: int = 0
    functions_modified: int = 0
    structs_added: int = 0
    structs_removed: int = 0
    structs_modified: int = 0
    modules_added: int = 0
    modules_removed: int = 0
    breaking_changes: bool = False
    total_changes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "functionsAdded": self.functions_added,
            "functionsRemoved": self.functions_removed,
            "functionsModified": self.functions_modified,
            "structsAdded": self.structs_added,
            "structsRemoved": self.structs_removed,
            "structsModified": self.structs_modified,
            "modulesAdded": self.modules_added,
            "modulesRemoved": self.modules_removed,
            "breakingChanges": self.breaking_changes,
            "totalChanges": self.total_changes,
        }


@dataclass(frozen=True, slots=True)
class StructuralDiff:
    """Complete structural diff between two package versions."""

    from_version: int
    to_version: int
    from_package_id: str
    to_package_id: str
    summary: StructuralDiffSummary
    changes: list[ABIChange] = field(default_factory=list)
    changes_by_module: dict[str, list[ABIChange]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "fromVersion": self.from_version,
            "toVersion": self.to_version,
            "fromPackageId": self.from_package_id,
            "toPackageId": self.to_package_id,
            "summary": self.summary.to_dict(),
            "changes": [c.to_dict() for c in self.changes],
            "changesByModule": {
                name: [c.to_dict() for c in changes]
                for name, changes in self.changes_by_module.items()
            },
        }


# ---------------------------------------------------------------------------
# Source diff output
# ---------------------------------------------------------------------------

LineType = Literal["context", "add", "remove"]


@dataclass(frozen=True, slots=True)
class DiffLine:
    type: LineType
    content: str
    old_line: int | None = None  # None for added lines
    new_line: int | None = None  # None for removed lines

    def to_dict(self) -> dict[str, Any]:
        line_number: dict[str, int] = {}
        if self.old_line is not None:
            line_number["old"] = self.old_line
        if self.new_line is not None:
            line_number["new"] = self.new_line
        return {"type": self.type, "content": self.content, "lineNumber": line_number}


@dataclass(frozen=True, slots=True)
class DiffHunk:
    """Contiguous block of changes with bounded context.

    Header fields always agree with ``lines``: ``old_lines`` counts context
    and remove lines, ``new_lines`` counts context and add lines.
    """

    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: tuple[DiffLine, ...] = ()

    @property
    def header(self) -> str:
        return f"@@ -{self.old_start},{self.old_lines} +{self.new_start},{self.new_lines} @@"

    def to_dict(self) -> dict[str, Any]:
        return {
            "oldStart": self.old_start,
            "oldLines": self.old_lines,
            "newStart": self.new_start,
            "newLines": self.new_lines,
            "lines": [line.to_dict() for line in self.lines],
        }


@dataclass(frozen=True, slots=True)
class SourceDiffStats:
    lines_added: int = 0
    lines_removed: int = 0

    @property
    def lines_changed(self) -> int:
        return self.lines_added + self.lines_removed

    def to_dict(self) -> dict[str, int]:
        return {
            "linesAdded": self.lines_added,
            "linesRemoved": self.lines_removed,
            "linesChanged": self.lines_changed,
        }


@dataclass(frozen=True, slots=True)
class SourceDiff:
    """Source-level diff for a single module."""

    module_name: str
    from_version: int
    to_version: int
    hunks: tuple[DiffHunk, ...] = ()
    stats: SourceDiffStats = field(default_factory=SourceDiffStats)
    exists_in_old: bool = False
    exists_in_new: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "moduleName": self.module_name,
            "fromVersion": self.from_version,
            "toVersion": self.to_version,
            "hunks": [h.to_dict() for h in self.hunks],
            "stats": self.stats.to_dict(),
            "existsInOld": self.exists_in_old,
            "existsInNew": self.exists_in_new,
        }


@dataclass(frozen=True, slots=True)
class DiffOptions:
    context_lines: int = 3
    ignore_whitespace: bool = False
    modules: frozenset[str] | None = None  # None means all modules


# ---------------------------------------------------------------------------
# Combined comparison
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ComparisonMetadata:
    from_package_id: str
    to_package_id: str
    from_version: int
    to_version: int
    network: str
    compared_at: str  # ISO-8601 UTC

    def to_dict(self) -> dict[str, Any]:
        return {
            "fromPackageId": self.from_package_id,
            "toPackageId": self.to_package_id,
            "fromVersion": self.from_version,
            "toVersion": self.to_version,
            "network": self.network,
            "comparedAt": self.compared_at,
        }


@dataclass(frozen=True, slots=True)
class PackageComparison:
    structural: StructuralDiff
    sources: dict[str, SourceDiff]
    metadata: ComparisonMetadata

    def to_dict(self) -> dict[str, Any]:
        return {
            "structural": self.structural.to_dict(),
            "sources": {name: diff.to_dict() for name, diff in self.sources.items()},
            "metadata": self.metadata.to_dict(),
        }
