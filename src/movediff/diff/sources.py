"""Build module interfaces from normalized-module JSON.

Accepts the shape a Sui full node returns from
``sui_getNormalizedMoveModulesByPackage`` / ``getNormalizedMoveModule``
(already decoded into Python dicts).  Fetching is the caller's job; this
module only validates and converts.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from movediff.core.errors import MalformedInputError
from movediff.core.logging import get_logger
from movediff.diff.models import (
    PRIMITIVE_NAMES,
    Ability,
    FieldInterface,
    FunctionInterface,
    ModuleInterface,
    MutableReference,
    Primitive,
    Reference,
    StructInterface,
    StructRef,
    StructTypeParameter,
    TypeExpr,
    TypeParameter,
    Vector,
    Visibility,
)

log = get_logger(__name__)


# ============================================================================
# Types
# ============================================================================


def parse_type(raw: Any) -> TypeExpr:
    """Convert one normalized type into a TypeExpr.

    Raises:
        MalformedInputError: On an unknown variant tag or a value that is
            neither a primitive name nor a single-key variant object.
    """
    if isinstance(raw, str):
        if raw in PRIMITIVE_NAMES:
            return Primitive(raw)
        raise MalformedInputError.unknown_type_tag(raw)

    if not isinstance(raw, Mapping) or len(raw) != 1:
        raise MalformedInputError.invalid_type(raw)

    ((tag, value),) = raw.items()
    if tag == "Vector":
        return Vector(parse_type(value))
    if tag == "Reference":
        return Reference(parse_type(value))
    if tag == "MutableReference":
        return MutableReference(parse_type(value))
    if tag == "TypeParameter":
        if isinstance(value, bool) or not isinstance(value, int):
            raise MalformedInputError.invalid_type(raw)
        return TypeParameter(value)
    if tag == "Struct":
        if not isinstance(value, Mapping):
            raise MalformedInputError.invalid_type(raw)
        return StructRef(
            address=_require(value, "address", "Struct"),
            module=_require(value, "module", "Struct"),
            name=_require(value, "name", "Struct"),
            type_arguments=tuple(parse_type(t) for t in value.get("typeArguments", [])),
        )
    raise MalformedInputError.unknown_type_tag(str(tag))


def _require(raw: Mapping[str, Any], key: str, owner: str) -> Any:
    if key not in raw:
        raise MalformedInputError.missing_field(owner, key)
    return raw[key]


def _parse_ability(raw: Any) -> Ability:
    try:
        return Ability(raw)
    except ValueError:
        raise MalformedInputError.unknown_ability(raw) from None


def _parse_ability_set(raw: Any) -> frozenset[Ability]:
    """Ability sets arrive either bare or wrapped as ``{"abilities": [...]}``."""
    if isinstance(raw, Mapping):
        raw = raw.get("abilities", [])
    return frozenset(_parse_ability(a) for a in raw)


# ============================================================================
# Functions and structs
# ============================================================================


def parse_function(name: str, raw: Mapping[str, Any]) -> FunctionInterface:
    owner = f"function {name}"
    visibility_raw = _require(raw, "visibility", owner)
    try:
        visibility = Visibility(visibility_raw)
    except ValueError:
        raise MalformedInputError.unknown_visibility(visibility_raw) from None

    return FunctionInterface(
        name=name,
        visibility=visibility,
        is_entry=bool(raw.get("isEntry", False)),
        type_parameters=tuple(_parse_ability_set(tp) for tp in raw.get("typeParameters", [])),
        parameters=tuple(parse_type(p) for p in raw.get("parameters", [])),
        returns=tuple(parse_type(r) for r in raw.get("return", [])),
    )


def parse_struct(name: str, raw: Mapping[str, Any]) -> StructInterface:
    owner = f"struct {name}"
    fields = []
    for f in raw.get("fields", []):
        fields.append(
            FieldInterface(
                name=_require(f, "name", owner),
                type=parse_type(_require(f, "type", owner)),
            )
        )

    type_params = tuple(
        StructTypeParameter(
            constraints=_parse_ability_set(tp.get("constraints", [])),
            is_phantom=bool(tp.get("isPhantom", False)),
        )
        for tp in raw.get("typeParameters", [])
    )

    return StructInterface(
        name=name,
        abilities=_parse_ability_set(raw.get("abilities", [])),
        type_parameters=type_params,
        fields=tuple(fields),
    )


# ============================================================================
# Modules
# ============================================================================


def parse_module(raw: Mapping[str, Any], name: str | None = None) -> ModuleInterface:
    """Convert one normalized module.

    Args:
        raw: Normalized module object.
        name: Module name, when the payload omits it (keyed responses).
    """
    module_name = name or _require(raw, "name", "module")
    functions = {
        fn_name: parse_function(fn_name, fn_raw)
        for fn_name, fn_raw in raw.get("exposedFunctions", {}).items()
    }
    structs = {
        s_name: parse_struct(s_name, s_raw) for s_name, s_raw in raw.get("structs", {}).items()
    }
    return ModuleInterface(
        name=module_name,
        functions=functions,
        structs=structs,
        address=raw.get("address"),
    )


def parse_modules(raw: Mapping[str, Mapping[str, Any]]) -> dict[str, ModuleInterface]:
    """Convert a ``{module_name: normalized_module}`` package response."""
    modules = {name: parse_module(module_raw, name=name) for name, module_raw in raw.items()}
    log.debug("modules_parsed", count=len(modules))
    return modules
