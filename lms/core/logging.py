from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_CONFIGURED = False

_SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
]


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: int | str = logging.INFO, *, json_logs: bool = True) -> None:
    """Configure structlog once for the process.

    ``level`` accepts a number or a name such as ``"DEBUG"``. JSON output is
    the default; ``json_logs=False`` switches to the human-readable console
    renderer for local work. Later calls are ignored, so building several
    applications in one process (as the tests do) keeps the first setup.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    numeric_level = _resolve_level(level)
    logging.basicConfig(level=numeric_level, format="%(message)s", stream=sys.stdout)
    # SQLAlchemy echoes through its own loggers; keep them quiet unless debugging.
    logging.getLogger("sqlalchemy.engine").setLevel(max(numeric_level, logging.WARNING))

    tail: list[Any]
    if json_logs:
        tail = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        tail = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, *tail],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True
