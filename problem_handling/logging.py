from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, cast

import structlog
from structlog.typing import FilteringBoundLogger

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "OFF": logging.CRITICAL + 10,
}


def configure_logging(level: str = "INFO") -> None:
    log_level = _LEVELS.get(level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    return cast(FilteringBoundLogger, structlog.get_logger(name))


@contextmanager
def scoped_log_context(**fields: Any) -> Iterator[dict[str, Any]]:
    """Bind ``fields`` into the structlog context for the duration of the block.

    On exit a non-empty prior context is reinstated verbatim. With no prior
    context only the keys bound here are removed, so keys bound meanwhile by
    other code on the same context survive.
    """
    snapshot = structlog.contextvars.get_contextvars()
    structlog.contextvars.bind_contextvars(**fields)
    try:
        yield snapshot
    finally:
        if snapshot:
            structlog.contextvars.clear_contextvars()
            structlog.contextvars.bind_contextvars(**snapshot)
        else:
            structlog.contextvars.unbind_contextvars(*fields)
