"""Structured logging configuration using structlog with JSON output.

Configures structlog for JSON logging to stdout or another stream. Library
modules log through the stdlib `logging` module; those records are rendered
by the same structlog processor chain, so every log line is one JSON object
carrying the service name, timestamp, log level and event message.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog


def configure_logging(
    service_name: str = "hivesense", level: str = "INFO", stream: TextIO | None = None
) -> None:
    """Configure structlog and stdlib logging with JSON rendering for a named service.

    Args:
        service_name: Bound to every log entry (e.g. "report", "monitor").
        level: Root log level as a string (e.g. "DEBUG", "INFO", "WARNING").
        stream: Where log lines go; stdout when None.
    """
    stream = stream or sys.stdout
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level!r}")

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )

    # stdlib records (logging.getLogger(__name__) in services) go through the same chain
    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[structlog.stdlib.add_logger_name, *shared_processors],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(numeric_level)

    # httpx logs every request at INFO, including the api_key query string
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name)
