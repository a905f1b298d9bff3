"""Package version diff: structural (ABI) and source-level comparison.

Public API re-exports for the diff subpackage.
"""

from movediff.diff.compare import compare_package, options_from_config
from movediff.diff.formatter import DiffFormatter, create_diff_formatter
from movediff.diff.models import (
    ABIChange,
    Ability,
    ChangeCategory,
    ChangeDetails,
    ChangeRisk,
    ChangeType,
    DiffHunk,
    DiffLine,
    DiffOptions,
    FieldInterface,
    FunctionInterface,
    ModuleInterface,
    MutableReference,
    PackageComparison,
    Primitive,
    Reference,
    SourceDiff,
    SourceDiffStats,
    StructInterface,
    StructRef,
    StructTypeParameter,
    StructuralDiff,
    StructuralDiffSummary,
    TypeExpr,
    TypeParameter,
    Vector,
    Visibility,
)
from movediff.diff.signatures import describe_function, describe_struct
from movediff.diff.source import (
    SourceDiffer,
    create_source_differ,
    format_unified_diff,
    get_summary,
)
from movediff.diff.sources import parse_module, parse_modules, parse_type
from movediff.diff.structural import (
    StructuralDiffer,
    calculate_summary,
    create_structural_differ,
)
from movediff.diff.types import describe_type, type_lists_equal, types_equal

__all__ = [
    "ABIChange",
    "Ability",
    "ChangeCategory",
    "ChangeDetails",
    "ChangeRisk",
    "ChangeType",
    "DiffFormatter",
    "DiffHunk",
    "DiffLine",
    "DiffOptions",
    "FieldInterface",
    "FunctionInterface",
    "ModuleInterface",
    "MutableReference",
    "PackageComparison",
    "Primitive",
    "Reference",
    "SourceDiff",
    "SourceDiffStats",
    "SourceDiffer",
    "StructInterface",
    "StructRef",
    "StructTypeParameter",
    "StructuralDiff",
    "StructuralDiffSummary",
    "StructuralDiffer",
    "TypeExpr",
    "TypeParameter",
    "Vector",
    "Visibility",
    "calculate_summary",
    "compare_package",
    "create_diff_formatter",
    "create_source_differ",
    "create_structural_differ",
    "describe_function",
    "describe_struct",
    "describe_type",
    "format_unified_diff",
    "get_summary",
    "options_from_config",
    "parse_module",
    "parse_modules",
    "parse_type",
    "type_lists_equal",
    "types_equal",
]
