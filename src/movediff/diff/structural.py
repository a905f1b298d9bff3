"""Structural (ABI) diff engine.

Compares two sets of ModuleInterfaces (before vs after) and classifies
every interface change by risk.  No I/O; purely functional.

Change types per element:
- added: present only in after (non_breaking)
- removed: present only in before (breaking)
- modified: present in both with a differing signature/definition

Names are iterated in sorted order so identical inputs always yield the
same change list.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from movediff.core.logging import get_logger
from movediff.diff.models import (
    ABIChange,
    ChangeCategory,
    ChangeDetails,
    ChangeRisk,
    ChangeType,
    FunctionInterface,
    ModuleInterface,
    StructInterface,
    StructuralDiff,
    StructuralDiffSummary,
    Visibility,
    sorted_abilities,
)
from movediff.diff.signatures import describe_function, describe_struct
from movediff.diff.types import type_lists_equal, types_equal

log = get_logger(__name__)


def _risk(is_breaking: bool) -> ChangeRisk:
    return ChangeRisk.BREAKING if is_breaking else ChangeRisk.NON_BREAKING


def _bool_text(value: bool) -> str:
    return "true" if value else "false"


class StructuralDiffer:
    """Compares module interfaces and aggregates package-level reports."""

    def compare_modules(self, before: ModuleInterface, after: ModuleInterface) -> list[ABIChange]:
        """Compare two versions of one module: functions first, then structs."""
        changes = self._compare_functions(before, after)
        changes.extend(self._compare_structs(before, after))
        return changes

    def compare_packages(
        self,
        before_modules: Mapping[str, ModuleInterface],
        after_modules: Mapping[str, ModuleInterface],
        from_version: int,
        to_version: int,
        from_package_id: str,
        to_package_id: str,
    ) -> StructuralDiff:
        """Compare every module of two package versions."""
        changes: list[ABIChange] = []
        changes_by_module: dict[str, list[ABIChange]] = {}

        for module_name in sorted(set(before_modules) | set(after_modules)):
            before = before_modules.get(module_name)
            after = after_modules.get(module_name)

            if before is None and after is not None:
                module_changes = _added_module_changes(module_name, after)
            elif before is not None and after is None:
                # Removal is total; internals are not enumerated
                module_changes = [
                    ABIChange(
                        type=ChangeType.REMOVED,
                        category=ChangeCategory.MODULE,
                        name=module_name,
                        module_name=module_name,
                        risk=ChangeRisk.BREAKING,
                        description=f'Module "{module_name}" was removed',
                    )
                ]
            elif before is not None and after is not None:
                module_changes = [
                    c.with_module(module_name) for c in self.compare_modules(before, after)
                ]
            else:
                module_changes = []

            if module_changes:
                changes_by_module[module_name] = module_changes
                changes.extend(module_changes)

        summary = calculate_summary(changes)
        log.debug(
            "structural_diff_complete",
            from_version=from_version,
            to_version=to_version,
            modules=len(set(before_modules) | set(after_modules)),
            total_changes=summary.total_changes,
            breaking=summary.breaking_changes,
        )

        return StructuralDiff(
            from_version=from_version,
            to_version=to_version,
            from_package_id=from_package_id,
            to_package_id=to_package_id,
            summary=summary,
            changes=changes,
            changes_by_module=changes_by_module,
        )

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def _compare_functions(
        self, before: ModuleInterface, after: ModuleInterface
    ) -> list[ABIChange]:
        changes: list[ABIChange] = []
        for name in sorted(set(before.functions) | set(after.functions)):
            old = before.functions.get(name)
            new = after.functions.get(name)

            if old is None and new is not None:
                changes.append(
                    ABIChange(
                        type=ChangeType.ADDED,
                        category=ChangeCategory.FUNCTION,
                        name=name,
                        risk=ChangeRisk.NON_BREAKING,
                        description=f'Function "{name}" was added',
                        details=ChangeDetails(
                            changes=("New function",), after=describe_function(new)
                        ),
                    )
                )
            elif old is not None and new is None:
                changes.append(
                    ABIChange(
                        type=ChangeType.REMOVED,
                        category=ChangeCategory.FUNCTION,
                        name=name,
                        risk=ChangeRisk.BREAKING,
                        description=f'Function "{name}" was removed',
                        details=ChangeDetails(
                            changes=("Function removed",), before=describe_function(old)
                        ),
                    )
                )
            elif old is not None and new is not None:
                modified = self._compare_function_signatures(name, old, new)
                if modified is not None:
                    changes.append(modified)
        return changes

    def _compare_function_signatures(
        self, name: str, before: FunctionInterface, after: FunctionInterface
    ) -> ABIChange | None:
        descs: list[str] = []
        is_breaking = False

        if before.visibility != after.visibility:
            descs.append(f"Visibility: {before.visibility.value} → {after.visibility.value}")
            # Only narrowing from Public can break callers
            if before.visibility == Visibility.PUBLIC:
                is_breaking = True

        if before.is_entry != after.is_entry:
            descs.append(f"Entry: {_bool_text(before.is_entry)} → {_bool_text(after.is_entry)}")
            if before.is_entry:
                is_breaking = True

        if len(before.type_parameters) != len(after.type_parameters):
            descs.append(
                f"Type parameters: {len(before.type_parameters)} → {len(after.type_parameters)}"
            )
            is_breaking = True

        if not type_lists_equal(before.parameters, after.parameters):
            descs.append("Parameters changed")
            is_breaking = True

        if not type_lists_equal(before.returns, after.returns):
            descs.append("Return type changed")
            is_breaking = True

        if not descs:
            return None

        return ABIChange(
            type=ChangeType.MODIFIED,
            category=ChangeCategory.FUNCTION,
            name=name,
            risk=_risk(is_breaking),
            description=f'Function "{name}" signature changed',
            details=ChangeDetails(
                changes=tuple(descs),
                before=describe_function(before),
                after=describe_function(after),
            ),
        )

    # ------------------------------------------------------------------
    # Structs
    # ------------------------------------------------------------------

    def _compare_structs(self, before: ModuleInterface, after: ModuleInterface) -> list[ABIChange]:
        changes: list[ABIChange] = []
        for name in sorted(set(before.structs) | set(after.structs)):
            old = before.structs.get(name)
            new = after.structs.get(name)

            if old is None and new is not None:
                changes.append(
                    ABIChange(
                        type=ChangeType.ADDED,
                        category=ChangeCategory.STRUCT,
                        name=name,
                        risk=ChangeRisk.NON_BREAKING,
                        description=f'Struct "{name}" was added',
                        details=ChangeDetails(changes=("New struct",), after=describe_struct(new)),
                    )
                )
            elif old is not None and new is None:
                changes.append(
                    ABIChange(
                        type=ChangeType.REMOVED,
                        category=ChangeCategory.STRUCT,
                        name=name,
                        risk=ChangeRisk.BREAKING,
                        description=f'Struct "{name}" was removed',
                        details=ChangeDetails(
                            changes=("Struct removed",), before=describe_struct(old)
                        ),
                    )
                )
            elif old is not None and new is not None:
                modified = self._compare_struct_definitions(name, old, new)
                if modified is not None:
                    changes.append(modified)
        return changes

    def _compare_struct_definitions(
        self, name: str, before: StructInterface, after: StructInterface
    ) -> ABIChange | None:
        descs: list[str] = []
        is_breaking = False

        for ability in sorted_abilities(before.abilities - after.abilities):
            descs.append(f"Removed ability: {ability.value.lower()}")
            is_breaking = True
        for ability in sorted_abilities(after.abilities - before.abilities):
            descs.append(f"Added ability: {ability.value.lower()}")

        if len(before.type_parameters) != len(after.type_parameters):
            descs.append(
                f"Type parameters: {len(before.type_parameters)} → {len(after.type_parameters)}"
            )
            is_breaking = True

        before_fields = {f.name: f for f in before.fields}
        after_fields = {f.name: f for f in after.fields}

        for field_name, old_field in before_fields.items():
            new_field = after_fields.get(field_name)
            if new_field is None:
                descs.append(f"Removed field: {field_name}")
                is_breaking = True
            elif not types_equal(old_field.type, new_field.type):
                descs.append(f'Field "{field_name}" type changed')
                is_breaking = True

        for field_name in after_fields:
            if field_name not in before_fields:
                descs.append(f"Added field: {field_name}")
                # Stored objects keep the old layout; any new field breaks deserialization
                is_breaking = True

        if not descs:
            return None

        return ABIChange(
            type=ChangeType.MODIFIED,
            category=ChangeCategory.STRUCT,
            name=name,
            risk=_risk(is_breaking),
            description=f'Struct "{name}" definition changed',
            details=ChangeDetails(
                changes=tuple(descs),
                before=describe_struct(before),
                after=describe_struct(after),
            ),
        )

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def is_breaking_change(self, change: ABIChange) -> bool:
        return change.risk == ChangeRisk.BREAKING

    def get_breaking_changes(self, changes: Iterable[ABIChange]) -> list[ABIChange]:
        return [c for c in changes if self.is_breaking_change(c)]


def _added_module_changes(module_name: str, after: ModuleInterface) -> list[ABIChange]:
    """A new module plus every function and struct it brings."""
    changes = [
        ABIChange(
            type=ChangeType.ADDED,
            category=ChangeCategory.MODULE,
            name=module_name,
            module_name=module_name,
            risk=ChangeRisk.NON_BREAKING,
            description=f'Module "{module_name}" was added',
        )
    ]
    for func_name in sorted(after.functions):
        changes.append(
            ABIChange(
                type=ChangeType.ADDED,
                category=ChangeCategory.FUNCTION,
                name=func_name,
                module_name=module_name,
                risk=ChangeRisk.NON_BREAKING,
                description=f'Function "{func_name}" was added in new module',
            )
        )
    for struct_name in sorted(after.structs):
        changes.append(
            ABIChange(
                type=ChangeType.ADDED,
                category=ChangeCategory.STRUCT,
                name=struct_name,
                module_name=module_name,
                risk=ChangeRisk.NON_BREAKING,
                description=f'Struct "{struct_name}" was added in new module',
            )
        )
    return changes


_COUNTER_KEYS: dict[tuple[ChangeCategory, ChangeType], str] = {
    (ChangeCategory.FUNCTION, ChangeType.ADDED): "functions_added",
    (ChangeCategory.FUNCTION, ChangeType.REMOVED): "functions_removed",
    (ChangeCategory.FUNCTION, ChangeType.MODIFIED): "functions_modified",
    (ChangeCategory.STRUCT, ChangeType.ADDED): "structs_added",
    (ChangeCategory.STRUCT, ChangeType.REMOVED): "structs_removed",
    (ChangeCategory.STRUCT, ChangeType.MODIFIED): "structs_modified",
    (ChangeCategory.MODULE, ChangeType.ADDED): "modules_added",
    (ChangeCategory.MODULE, ChangeType.REMOVED): "modules_removed",
}


def calculate_summary(changes: list[ABIChange]) -> StructuralDiffSummary:
    """Derive summary counters from a single scan of the change list."""
    counts = dict.fromkeys(_COUNTER_KEYS.values(), 0)
    breaking = False

    for change in changes:
        if change.risk == ChangeRisk.BREAKING:
            breaking = True
        key = _COUNTER_KEYS.get((change.category, change.type))
        if key is not None:
            counts[key] += 1

    return StructuralDiffSummary(
        **counts,
        breaking_changes=breaking,
        total_changes=len(changes),
    )


def create_structural_differ() -> StructuralDiffer:
    return StructuralDiffer()
