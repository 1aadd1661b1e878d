"""structlog setup for the tagging service.

Every event carries the configured organization so that log lines from
several deployments sharing one aggregator can be told apart.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from assettags.core.config import settings

# Loggers that are chatty at INFO and only useful when debugging.
QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "alembic.runtime.migration")


def add_org_id(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Stamp events with the organization unless a call already bound one."""
    event_dict.setdefault("org_id", settings.org_id)
    return event_dict


def build_processors(debug: bool) -> list[Any]:
    """Processor chain: console output in debug, JSON lines otherwise."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        add_org_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return processors


def setup_logging() -> None:
    """Configure structlog and the stdlib loggers it writes through."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=build_processors(settings.debug),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(log_level)

    if not settings.debug:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a bound logger, usually called with ``__name__``."""
    return structlog.get_logger(name)
