"""movediff error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Input (malformed module interface data)
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Input (3xxx)
    INPUT_UNKNOWN_TYPE_TAG = 3001
    INPUT_INVALID_TYPE = 3002
    INPUT_UNKNOWN_VISIBILITY = 3003
    INPUT_UNKNOWN_ABILITY = 3004
    INPUT_MISSING_FIELD = 3005


@dataclass(frozen=True, slots=True)
class MoveDiffError(Exception):
    """Base error with structured context for callers."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'INPUT_UNKNOWN_TYPE_TAG')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(MoveDiffError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class MalformedInputError(MoveDiffError):
    """Module interface data that cannot be compared safely.

    Raised instead of treating unknown data as equal, since that would
    hide breaking changes.
    """

    @classmethod
    def unknown_type_tag(cls, tag: str) -> "MalformedInputError":
        return cls(
            code=ErrorCode.INPUT_UNKNOWN_TYPE_TAG,
            message=f"Unknown type expression tag: {tag!r}",
            details={"tag": tag},
        )

    @classmethod
    def invalid_type(cls, value: Any) -> "MalformedInputError":
        return cls(
            code=ErrorCode.INPUT_INVALID_TYPE,
            message=f"Not a type expression: {value!r}",
            details={"value": repr(value), "python_type": type(value).__name__},
        )

    @classmethod
    def unknown_visibility(cls, value: Any) -> "MalformedInputError":
        return cls(
            code=ErrorCode.INPUT_UNKNOWN_VISIBILITY,
            message=f"Unknown function visibility: {value!r}",
            details={"value": str(value)},
        )

    @classmethod
    def unknown_ability(cls, value: Any) -> "MalformedInputError":
        return cls(
            code=ErrorCode.INPUT_UNKNOWN_ABILITY,
            message=f"Unknown ability: {value!r}",
            details={"value": str(value)},
        )

    @classmethod
    def missing_field(cls, owner: str, field: str) -> "MalformedInputError":
        return cls(
            code=ErrorCode.INPUT_MISSING_FIELD,
            message=f"Missing required field '{field}' in {owner}",
            details={"owner": owner, "field": field},
        )
