"""Core module exports."""

from movediff.core.errors import (
    ConfigError,
    ErrorCode,
    MalformedInputError,
    MoveDiffError,
)
from movediff.core.logging import (
    clear_comparison_id,
    configure_logging,
    get_comparison_id,
    get_logger,
    set_comparison_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "MalformedInputError",
    "MoveDiffError",
    # Logging
    "clear_comparison_id",
    "configure_logging",
    "get_comparison_id",
    "get_logger",
    "set_comparison_id",
]
