"""Library logging for movediff.

Module loggers are structlog loggers wrapped around stdlib loggers, so a
host application that never calls ``configure_logging`` sees nothing
beyond its own stdlib setup (diffing stays silent by default).

``configure_logging`` installs one stdlib handler per configured output,
each with its own level and a console or JSON renderer.  A comparison id,
bound for the duration of ``compare_package``, rides along on every event
through structlog's contextvars.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from movediff.config.models import LoggingConfig, LogOutputConfig

_COMPARISON_KEY = "comparison_id"


def get_logger(name: str) -> Any:
    """structlog logger emitting through ``logging.getLogger(name)``."""
    return structlog.wrap_logger(logging.getLogger(name)).bind(logger=name)


# ---------------------------------------------------------------------------
# Comparison correlation
# ---------------------------------------------------------------------------


def get_comparison_id() -> str | None:
    return structlog.contextvars.get_contextvars().get(_COMPARISON_KEY)


def set_comparison_id(comparison_id: str | None = None) -> str:
    """Bind a comparison id (generated when not given) to the logging context."""
    cid = comparison_id or uuid4().hex[:12]
    structlog.contextvars.bind_contextvars(**{_COMPARISON_KEY: cid})
    return cid


def clear_comparison_id() -> None:
    structlog.contextvars.unbind_contextvars(_COMPARISON_KEY)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
]


def _level(name: str) -> int:
    return logging.getLevelNamesMapping()[name.upper()]


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Route movediff events to the outputs in ``config``.

    Replaces any handlers on the root logger, so calling it again
    reconfigures rather than stacking outputs.
    """
    from movediff.config.models import LoggingConfig

    config = config or LoggingConfig()
    root_level = _level(config.level)

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(root_level)
    for output in config.outputs:
        root_logger.addHandler(_build_handler(output, output.level or config.level))


def _build_handler(output: LogOutputConfig, level: str) -> logging.Handler:
    handler: logging.Handler
    colors = False
    if output.destination in ("stderr", "stdout"):
        stream = sys.stderr if output.destination == "stderr" else sys.stdout
        handler = logging.StreamHandler(stream)
        colors = stream.isatty()
    else:
        path = Path(output.destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a")

    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colors)

    handler.setLevel(_level(level))
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )
    return handler
