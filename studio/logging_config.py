"""Logging setup driven by ``LoggingSettings``.

structlog renders every record. Module loggers from ``logging.getLogger`` go
through ``ProcessorFormatter`` with the same timestamp/level/logger fields,
so text and JSON output look the same whichever API emitted the line.
"""
from __future__ import annotations

import logging
import logging.config

import structlog

from .config import LoggingSettings, settings

SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


def build_formatter(renderer: str = "text") -> structlog.stdlib.ProcessorFormatter:
    """Formatter rendering one line per record, JSON or console."""
    if renderer == "json":
        processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ]
    return structlog.stdlib.ProcessorFormatter(
        processors=processors,
        foreign_pre_chain=SHARED_PROCESSORS,
    )


def build_logging_config(config: LoggingSettings) -> dict:
    """Translate settings into a ``dictConfig`` mapping."""
    formatter = "json" if config.format == "json" else "text"
    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": formatter,
        },
    }
    if config.file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": config.file,
            "encoding": "utf-8",
            "formatter": formatter,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "text": {"()": build_formatter, "renderer": "text"},
            "json": {"()": build_formatter, "renderer": "json"},
        },
        "handlers": handlers,
        "root": {
            "level": config.level.upper(),
            "handlers": list(handlers),
        },
    }


def setup_logging(config: LoggingSettings | None = None) -> None:
    """Configure stdlib handlers and structlog for the application."""
    logging.config.dictConfig(build_logging_config(config or settings.logging))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *SHARED_PROCESSORS,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
