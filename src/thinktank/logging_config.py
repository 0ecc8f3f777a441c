"""Structured logging configuration using structlog.

Review text is written to stdout by the caller, so every diagnostic,
including retry and audit events, goes to stderr. Machine-read
environments (production, CI) get one JSON object per line; interactive
runs get the console renderer.
"""

import logging
import sys
from typing import TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from thinktank.config import Settings


JSON_ENVIRONMENTS = frozenset({"production", "ci"})

NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add application context to all log events."""
    event_dict["app"] = "thinktank"
    return event_dict


def _select_renderer(environment: str, stream: TextIO) -> Processor:
    if environment.lower() in JSON_ENVIRONMENTS:
        return structlog.processors.JSONRenderer()
    isatty = getattr(stream, "isatty", None)
    return structlog.dev.ConsoleRenderer(colors=bool(isatty and isatty()))


def configure_logging(
    log_level: str = "INFO",
    environment: str = "development",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
        environment: "production" or "ci" select JSON output, anything
            else selects the console renderer
        stream: Destination stream, stderr by default
    """
    stream = stream or sys.stderr
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]
    if environment.lower() in JSON_ENVIRONMENTS:
        pre_chain.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_select_renderer(environment, stream),
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.get_logger(__name__).debug(
        "Logging configured", log_level=logging.getLevelName(level), environment=environment
    )


def configure_from_settings(settings: Settings, stream: TextIO | None = None) -> None:
    """Configure logging from LOG_LEVEL and ENVIRONMENT."""
    configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT, stream=stream)
