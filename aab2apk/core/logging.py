"""
Structured logging configuration for aab2apk.

Uses structlog for structured logging: coloured console output when attached to a
terminal, JSON lines when running inside a CI build log.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from .config import StepConfig


def setup_logging(config: StepConfig | None = None, level_name: str | None = None) -> None:
    """Configure structured logging for the step.

    Args:
        config: Optional step configuration providing the log level.
        level_name: Explicit level, wins over the configuration. INFO when
            neither is given.
    """
    log_level = level_name or (config.log_level if config else "INFO")
    level = getattr(logging, log_level, logging.INFO)

    interactive = sys.stderr.isatty()

    # Every record, structlog ones included, goes through rich. The console
    # resolves sys.stderr on each write, so swapped or closed streams are
    # never held on to.
    console = Console(stderr=True)
    handler = RichHandler(
        console=console,
        show_path=False,
        show_time=interactive,
        show_level=interactive,
        rich_tracebacks=True,
        tracebacks_show_locals=log_level == "DEBUG",
    )

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]

    if interactive:
        # rich already prints time and level
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=False),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured bound logger
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: object) -> None:
    """Bind context variables to all subsequent log entries in this context.

    Args:
        **kwargs: Context key-value pairs to bind
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
