"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (MOVEDIFF__SECTION__KEY)
3. YAML file (explicit path, else ~/.config/movediff/config.yaml)
4. Built-in defaults (this file)

Environment Variable Format:
    MOVEDIFF__<SECTION>__<KEY>=<VALUE>

Examples:
    MOVEDIFF__LOGGING__LEVEL=DEBUG
    MOVEDIFF__DIFF__CONTEXT_LINES=5
    MOVEDIFF__DIFF__IGNORE_WHITESPACE=true
    MOVEDIFF__FORMAT__COLORS=false
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        MOVEDIFF__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs one event per compared module.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class DiffConfig(BaseModel):
    """Source diff defaults.

    Env vars:
        MOVEDIFF__DIFF__CONTEXT_LINES: Context lines around each hunk
        MOVEDIFF__DIFF__IGNORE_WHITESPACE: Match lines ignoring surrounding whitespace
    """

    context_lines: int = Field(
        default=3,
        description="Unchanged lines shown before and after each change.",
    )
    ignore_whitespace: bool = Field(
        default=False,
        description="Treat lines differing only in leading/trailing whitespace as equal.",
    )
    modules: list[str] | None = Field(
        default=None,
        description="Restrict source diffs to these module names. None compares all.",
    )

    @field_validator("context_lines")
    @classmethod
    def validate_context_lines(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"context_lines must be >= 0, got {v}")
        return v


class FormatConfig(BaseModel):
    """Result formatter configuration.

    Env vars:
        MOVEDIFF__FORMAT__COLORS: Emit ANSI styles in table output
        MOVEDIFF__FORMAT__WIDTH: Render width for terminal output
    """

    colors: bool = True
    width: int = Field(
        default=120,
        description="Render width. Long change names wrap beyond this.",
    )

    @field_validator("width")
    @classmethod
    def validate_width(cls, v: int) -> int:
        if v < 40:
            raise ValueError(f"width must be >= 40, got {v}")
        return v


class MoveDiffConfig(BaseModel):
    """Root configuration.

    All settings can be configured via:
    - YAML: ~/.config/movediff/config.yaml or an explicit path
    - Env vars: MOVEDIFF__<SECTION>__<KEY>
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    diff: DiffConfig = Field(default_factory=DiffConfig)
    format: FormatConfig = Field(default_factory=FormatConfig)
