"""Structured logging configuration for radcache."""

import logging
import os
import sys
from collections.abc import Mapping, MutableMapping
from functools import lru_cache
from typing import Any, Optional

import structlog
from structlog.types import Processor


def _is_development() -> bool:
    """Check if running in development mode."""
    from .config import get_settings

    settings = get_settings()
    return settings.debug or os.getenv("ENV", "development") == "development"


def _add_app_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> Mapping[str, Any] | str | bytes | bytearray | tuple[Any, ...]:
    """Add library context to log entries."""
    event_dict["app"] = "radcache"
    return event_dict


def get_processors() -> list[Processor]:
    """Get structlog processors based on environment."""
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_app_context,
    ]

    if _is_development():
        return shared_processors + [
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        ]
    return shared_processors + [
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


@lru_cache(maxsize=1)
def configure_logging(level: Optional[str] = None) -> None:
    """Configure structured logging for the application.

    radcache never calls this itself; applications call it once at startup.
    """
    if level is None:
        from .config import get_settings

        level = get_settings().log_level

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=get_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Used until the application calls configure_logging(): hand events to the
# stdlib logger so the host's levels and handlers decide what is emitted.
_LIBRARY_PROCESSORS: list[Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_log_level,
    _add_app_context,
    structlog.processors.KeyValueRenderer(key_order=["event"]),
]


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance without touching global configuration."""
    if structlog.is_configured():
        return structlog.get_logger(name)  # type: ignore[no-any-return]
    return structlog.wrap_logger(  # type: ignore[no-any-return]
        logging.getLogger(name),
        processors=_LIBRARY_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
    )


class _LazyLogger:
    """Logger resolved per call, so a later configure_logging() takes effect."""

    def __init__(self, name: str):
        self._name = name

    def __getattr__(self, name: str):
        return getattr(get_logger(self._name), name)


cache_logger = _LazyLogger("radcache")


__all__ = [
    "configure_logging",
    "get_logger",
    "get_processors",
    "cache_logger",
]
