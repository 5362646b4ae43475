"""
Structured Logging Module

structlog events carry the id of the tool call being dispatched, so every
line emitted while a call is in flight (dispatcher, registry client, ncu
runner) can be grouped per invocation.

stdout carries the MCP protocol, so every log line (structlog and stdlib
logging alike) is written to stderr.

Pattern: Structured logging for observability
Pattern: Singleton configuration (configure once at startup)
"""

import contextvars
import logging
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


_configured: bool = False

STDLIB_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# =============================================================================
# Tool Call Context
# =============================================================================

_call_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "npm_helper_call_id", default=None
)


def get_correlation_id() -> Optional[str]:
    """Return the id of the tool call currently being dispatched, if any."""
    return _call_id.get()


@contextmanager
def correlation_id_context(call_id: str) -> Iterator[None]:
    """
    Bind a tool call id to everything logged inside the block.

    Example:
        >>> with correlation_id_context("call_3f9a0c1b2d4e"):
        ...     await handler(args)
    """
    token = _call_id.set(call_id)
    try:
        yield
    finally:
        _call_id.reset(token)


# =============================================================================
# Processors
# =============================================================================


def add_call_context(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
    """Stamp the event with UTC time and the active tool call id."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    call_id = _call_id.get()
    if call_id is not None:
        event_dict["correlation_id"] = call_id
    return event_dict


# =============================================================================
# Configuration
# =============================================================================


def configure_logging(
    level: str = "INFO",
    stream: Optional[TextIO] = None,
    json_output: bool = True,
    force: bool = False,
) -> None:
    """
    Configure structlog and stdlib logging for the server.

    Only the first call takes effect unless force=True.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Output stream (default: sys.stderr)
        json_output: One JSON object per line; console rendering otherwise
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    output = stream or sys.stderr
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    renderer: Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            add_call_context,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )

    # Module loggers use the stdlib; route them to the same stream.
    logging.basicConfig(level=numeric_level, stream=output, format=STDLIB_FORMAT, force=True)

    _configured = True


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger with the logger name bound as context.

    Configures logging with defaults if nothing configured it yet.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("tool call finished", tool="search_npm", elapsed_ms=412)
    """
    configure_logging()
    return structlog.get_logger().bind(logger=name)
