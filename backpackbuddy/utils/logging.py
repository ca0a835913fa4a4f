"""Structured logging setup using structlog.

One processor chain (context vars, log level, timestamps, exception info)
feeds a coloured ConsoleRenderer in development and a JSONRenderer when
``APP_ENV=production``.  Standard-library ``logging`` (httpx, uvicorn,
aiosqlite) is routed through the same chain so every line looks alike.

The API server logs to stdout.  The CLI passes ``stream=sys.stderr`` so that
stdout carries only command output.
"""

import logging
import os
import sys
from typing import TextIO

import structlog


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def configure_logging(
    log_level: str = "INFO",
    json_output: bool | None = None,
    stream: TextIO | None = None,
) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Force JSON (True) or console (False) rendering.  When
                     None, JSON is used only if ``APP_ENV`` is "production".
        stream: Where log lines go; stdout when omitted.

    Returns:
        A configured structlog BoundLogger.
    """
    if json_output is None:
        json_output = os.environ.get("APP_ENV", "development") == "production"
    stream = stream or sys.stdout
    level = logging.getLevelName(log_level.upper())

    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    structlog.configure(
        processors=[*_shared_processors(), renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            foreign_pre_chain=_shared_processors(),
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound to *name*, configuring defaults on first use."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
