"""Config module exports."""

from movediff.config.loader import load_config
from movediff.config.models import (
    DiffConfig,
    FormatConfig,
    LoggingConfig,
    LogOutputConfig,
    MoveDiffConfig,
)

__all__ = [
    "load_config",
    "DiffConfig",
    "FormatConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "MoveDiffConfig",
]
