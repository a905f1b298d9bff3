"""Canonical text for function signatures and struct definitions.

Used for the before/after snippets attached to ABI changes.
"""

from __future__ import annotations

from movediff.diff.models import FunctionInterface, StructInterface, sorted_abilities
from movediff.diff.types import describe_type


def _type_params(count: int) -> str:
    if count == 0:
        return ""
    return f"<{', '.join(f'T{i}' for i in range(count))}>"


def describe_function(func: FunctionInterface) -> str:
    """Describe a function signature for display.

    Example: ``public entry fun<T0>(&mut T0, U64): Bool``
    """
    params = ", ".join(describe_type(p) for p in func.parameters)
    returns = ""
    if func.returns:
        returns = f": {', '.join(describe_type(r) for r in func.returns)}"
    visibility = func.visibility.value.lower()
    entry = " entry" if func.is_entry else ""
    return f"{visibility}{entry} fun{_type_params(len(func.type_parameters))}({params}){returns}"


def describe_struct(struct: StructInterface) -> str:
    """Describe a struct for display.

    Example: ``struct<T0> has store, key { id: 0x2::object::UID, value: T0 }``
    """
    abilities = ", ".join(a.value.lower() for a in sorted_abilities(struct.abilities))
    fields = ", ".join(f"{f.name}: {describe_type(f.type)}" for f in struct.fields)
    return f"struct{_type_params(len(struct.type_parameters))} has {abilities} {{ {fields} }}"
