"""Structured logging configuration using structlog.

Everything is written to stderr: stdout belongs to the MCP stdio transport.
The Azure SDK and uvicorn log through the standard library, so their records
are sent to stderr as well and the chattiest loggers are held at WARNING.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Azure's HTTP logging policy prints every request and response header at INFO.
_NOISY_LOGGERS = (
    "azure",
    "azure.core.pipeline.policies.http_logging_policy",
    "azure.identity",
    "httpx",
)


def setup_logging(level: str = "info") -> None:
    """Configure structlog for JSON output to stderr and route stdlib logging there too."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(stream=sys.stderr, level=log_level, format="%(message)s", force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]
