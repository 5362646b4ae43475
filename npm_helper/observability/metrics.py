"""
Prometheus Metrics Module

Tool invocation and upstream request metrics. The server speaks MCP over
stdio and exposes no HTTP endpoint; generate_metrics() renders the registry
in the Prometheus text format for dumps and tests.

Pattern: Metrics collection for observability
"""

from prometheus_client import REGISTRY, Counter, Gauge, Histogram, generate_latest


# =============================================================================
# Tool Invocation Metrics
# =============================================================================

TOOL_CALLS_TOTAL = Counter(
    name="npm_helper_tool_calls_total",
    documentation="Total tool invocations by terminal outcome",
    labelnames=["tool", "outcome"],
)

TOOL_CALL_DURATION_SECONDS = Histogram(
    name="npm_helper_tool_call_duration_seconds",
    documentation="Tool invocation duration in seconds",
    labelnames=["tool"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0),
)

TOOL_CALLS_IN_PROGRESS = Gauge(
    name="npm_helper_tool_calls_in_progress",
    documentation="Tool invocations currently being dispatched",
    labelnames=["tool"],
)

# =============================================================================
# Upstream Metrics
# =============================================================================

UPSTREAM_REQUESTS_TOTAL = Counter(
    name="npm_helper_upstream_requests_total",
    documentation="Registry and website requests by endpoint and status",
    labelnames=["endpoint", "status"],
)

UPSTREAM_REQUEST_DURATION_SECONDS = Histogram(
    name="npm_helper_upstream_request_duration_seconds",
    documentation="Registry and website request duration in seconds",
    labelnames=["endpoint"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0),
)

GATE_WAIT_SECONDS = Histogram(
    name="npm_helper_gate_wait_seconds",
    documentation="Time spent queued in the paced gate",
    buckets=(0.0, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

MEMORY_RECLAIMS_TOTAL = Counter(
    name="npm_helper_memory_reclaims_total",
    documentation="gc.collect() passes triggered by the memory threshold",
)


# =============================================================================
# Helper Functions
# =============================================================================


def record_tool_call(tool: str, outcome: str, duration_seconds: float) -> None:
    """
    Record one finished tool invocation.

    Args:
        tool: Tool name (unknown names are bucketed as "unknown")
        outcome: OutcomeKind value
        duration_seconds: Time spent in the dispatcher
    """
    TOOL_CALLS_TOTAL.labels(tool=tool, outcome=outcome).inc()
    TOOL_CALL_DURATION_SECONDS.labels(tool=tool).observe(duration_seconds)


def record_upstream_request(endpoint: str, status: str, duration_seconds: float) -> None:
    """
    Record one upstream request.

    Args:
        endpoint: Logical endpoint (search, versions, details, page)
        status: HTTP status code, "timeout" or "error"
        duration_seconds: Request duration, gate wait excluded
    """
    UPSTREAM_REQUESTS_TOTAL.labels(endpoint=endpoint, status=status).inc()
    UPSTREAM_REQUEST_DURATION_SECONDS.labels(endpoint=endpoint).observe(duration_seconds)


def record_gate_wait(duration_seconds: float) -> None:
    GATE_WAIT_SECONDS.observe(duration_seconds)


def record_memory_reclaim() -> None:
    MEMORY_RECLAIMS_TOTAL.inc()


def generate_metrics() -> bytes:
    """Render all registered metrics in Prometheus text format."""
    return generate_latest(REGISTRY)
