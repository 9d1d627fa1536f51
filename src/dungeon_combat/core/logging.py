"""Diagnostic logging for the combat core, built on structlog.

Engine modules log keyword events (``logger.info("attack_resolved",
attacker=..., damage=...)``) for operators. This is separate from the
gameplay combat log, a plain list of messages kept on the combat state
for the host to display.

Development runs render colored console lines; production runs render
one JSON object per event.

Example:
    >>> from dungeon_combat.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("combat_started", hostiles=3)
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

    from dungeon_combat.core.config import Settings


APP_NAME = "dungeon_combat"
_STDLIB_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def add_app_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Stamp the application name on every event."""
    event_dict["app"] = APP_NAME
    return event_dict


def _build_processors(json_format: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)
        )
    return processors


def configure_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        level: Minimum level name; unknown names fall back to INFO.
        json_format: Render JSON lines instead of console output.
        log_file: Also write standard library records to this file.
    """
    threshold = logging.getLevelName(level.upper())
    if not isinstance(threshold, int):
        threshold = logging.INFO

    structlog.configure(
        processors=_build_processors(json_format),
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(format=_STDLIB_FORMAT, level=threshold, handlers=handlers, force=True)


def configure_logging_from_settings(settings: Settings) -> None:
    """Apply the ``log_level`` and ``json_logs`` settings."""
    configure_logging(level=settings.log_level, json_format=settings.json_logs)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Return a structlog logger, typically named after ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach key-value pairs to every event logged in this context.

    Example:
        >>> bind_context(encounter="crypt-3")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop everything attached with :func:`bind_context`."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "add_app_context",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
]
