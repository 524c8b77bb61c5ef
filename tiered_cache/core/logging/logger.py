#!/usr/bin/env python3
"""
Structured Logging Module using structlog

This module provides structured logging for the cache tiers with:
- Request ID correlation across one read-through call
- Stage numbering that mirrors the read-through state machine
- JSON formatting for log aggregation
- Redaction of emails and tokens that may appear in cache keys

Architectural Decision: structlog for production logging
- Context-aware logging with automatic field injection
- JSON output for log aggregation
- Async-safe via context variables
"""

import logging
import re
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone

import structlog
from structlog.types import EventDict, WrappedLogger

from tiered_cache.core.config.settings import get_settings

# Context variable for the correlation id of the current read
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

_EMAIL_PATTERN = re.compile(r"\b[\w.-]+@[\w.-]+\.\w+\b")
_TOKEN_PATTERN = re.compile(r"\b(?:sk|pk|eyJ)[a-zA-Z0-9_.-]{8,}\b")


def add_request_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add the request id from context to every log entry."""
    request_id = request_id_ctx.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return event_dict


def _redact(value: str) -> str:
    value = _EMAIL_PATTERN.sub("[EMAIL]", value)
    return _TOKEN_PATTERN.sub("[REDACTED]", value)


def redact_sensitive(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Redact emails and tokens from the message and the cache key field.

    Logical cache names are built by callers and frequently embed user
    identifiers, so ``cache_key`` is scrubbed along with the event text.
    """
    for field in ("event", "cache_key"):
        value = event_dict.get(field)
        if isinstance(value, str):
            event_dict[field] = _redact(value)
    return event_dict


def add_log_level_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Upper-case the level name."""
    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()
    return event_dict


def setup_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """
    Setup structured logging with structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'console')
    """
    settings = get_settings()

    log_level = log_level or settings.logging.LOG_LEVEL
    log_format = log_format or settings.logging.LOG_FORMAT

    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=getattr(logging, log_level.upper())
    )

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_request_id,
            add_timestamp,
            structlog.stdlib.add_log_level,
            add_log_level_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_sensitive,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("message", key="value", stage=Stage.WRITE_BACK)
    """
    return structlog.get_logger(name)


def set_request_id(request_id: str) -> None:
    """Set the correlation id for the current read."""
    request_id_ctx.set(request_id)


def get_request_id() -> str | None:
    """Get current correlation id from context."""
    return request_id_ctx.get()


def clear_request_id() -> None:
    """Clear the correlation id from context."""
    request_id_ctx.set(None)


@contextmanager
def request_context(request_id: str | None = None) -> Iterator[str]:
    """
    Scope a correlation id to one block.

    An id already set by the caller is kept unless ``request_id`` is given;
    otherwise a fresh one is generated. The previous value is restored on exit.

    Usage:
        with request_context() as request_id:
            ...
    """
    current = request_id or request_id_ctx.get() or uuid.uuid4().hex
    token = request_id_ctx.set(current)
    try:
        yield current
    finally:
        request_id_ctx.reset(token)


def log_stage(
    logger: structlog.stdlib.BoundLogger, stage: str, message: str, level: str = "info", **kwargs
) -> None:
    """
    Log a message with stage information.

    Args:
        logger: Logger instance
        stage: Stage identifier (a ``Stage`` member or plain string)
        message: Log message
        level: Log level (debug, info, warning, error, critical)
        **kwargs: Additional fields to log

    Usage:
        log_stage(logger, Stage.FAST_STORE_LOOKUP, "Fast store hit", cache_key="user:1")
    """
    log_func = getattr(logger, level.lower())
    stage_value = stage.value if hasattr(stage, "value") else stage
    log_func(message, stage=stage_value, **kwargs)
