"""
Observability Package

- Structured logging to stderr with correlation IDs
- Prometheus metrics for tool calls and upstream requests
- Memory sampling and best-effort reclamation
"""

from npm_helper.observability.logging import (
    configure_logging,
    correlation_id_context,
    get_correlation_id,
    get_logger,
)
from npm_helper.observability.memory import MemoryMonitor, MemorySample
from npm_helper.observability.metrics import (
    generate_metrics,
    record_tool_call,
    record_upstream_request,
)

__all__ = [
    "configure_logging",
    "correlation_id_context",
    "get_correlation_id",
    "get_logger",
    "MemoryMonitor",
    "MemorySample",
    "generate_metrics",
    "record_tool_call",
    "record_upstream_request",
]
