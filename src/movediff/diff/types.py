"""Structural equality and display for type expressions.

Equality is decided by walking both expressions variant by variant rather
than comparing serialized forms.  Anything that is not a known variant is
rejected with MalformedInputError: treating it as equal would hide a
breaking change.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import cast

from movediff.core.errors import MalformedInputError
from movediff.diff.models import (
    TYPE_EXPR_CLASSES,
    MutableReference,
    Primitive,
    Reference,
    StructRef,
    TypeExpr,
    TypeParameter,
    Vector,
)


def _check(t: object) -> None:
    if not isinstance(t, TYPE_EXPR_CLASSES):
        raise MalformedInputError.invalid_type(t)


def types_equal(a: TypeExpr, b: TypeExpr) -> bool:
    """Deep structural equality of two type expressions.

    Raises:
        MalformedInputError: If either side is not a type expression.
    """
    _check(a)
    _check(b)

    if type(a) is not type(b):
        return False

    # Same concrete class from here on
    if isinstance(a, Primitive):
        return a.name == cast(Primitive, b).name
    if isinstance(a, TypeParameter):
        return a.index == cast(TypeParameter, b).index
    if isinstance(a, Vector):
        return types_equal(a.element, cast(Vector, b).element)
    if isinstance(a, (Reference, MutableReference)):
        return types_equal(a.inner, cast("Reference | MutableReference", b).inner)
    if isinstance(a, StructRef):
        other = cast(StructRef, b)
        return (
            a.address == other.address
            and a.module == other.module
            and a.name == other.name
            and type_lists_equal(a.type_arguments, other.type_arguments)
        )
    raise MalformedInputError.invalid_type(a)


def type_lists_equal(a: Sequence[TypeExpr], b: Sequence[TypeExpr]) -> bool:
    """Order-sensitive equality of two type lists."""
    if len(a) != len(b):
        # Still validate so malformed data is never silently accepted
        for t in (*a, *b):
            _check(t)
        return False
    # Evaluate every pair so a malformed entry after a mismatch still raises
    results = [types_equal(x, y) for x, y in zip(a, b, strict=True)]
    return all(results)


def describe_type(t: TypeExpr) -> str:
    """Render a type expression the way Move source spells it.

    Examples:
        Primitive("U64") -> U64
        Vector(Primitive("U8")) -> vector<U8>
        StructRef("0x2", "coin", "Coin", (sui,)) -> 0x2::coin::Coin<0x2::sui::SUI>
        MutableReference(TypeParameter(0)) -> &mut T0
    """
    if isinstance(t, Primitive):
        return t.name
    if isinstance(t, Vector):
        return f"vector<{describe_type(t.element)}>"
    if isinstance(t, StructRef):
        args = ""
        if t.type_arguments:
            args = f"<{', '.join(describe_type(a) for a in t.type_arguments)}>"
        return f"{t.address}::{t.module}::{t.name}{args}"
    if isinstance(t, TypeParameter):
        return f"T{t.index}"
    if isinstance(t, Reference):
        return f"&{describe_type(t.inner)}"
    if isinstance(t, MutableReference):
        return f"&mut {describe_type(t.inner)}"
    raise MalformedInputError.invalid_type(t)
