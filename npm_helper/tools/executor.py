"""
Tool Dispatcher - lookup, validation and bounded execution of tool calls.

Each invocation moves through validating -> invoking -> settled and ends in
exactly one InvocationOutcome:

- UNKNOWN_OPERATION / INVALID_ARGUMENTS: the request was malformed. No
  handler runs and no upstream request is made.
- SUCCESS: the handler's text.
- HANDLER_ERROR: the handler raised; the text is its message.
- TIMEOUT: the invocation budget elapsed, or a network deadline inside the
  handler fired.

The invocation budget detaches rather than cancels: a handler still queued
on the PacedGate or waiting for ncu keeps running after the caller has been
answered, and its late result is dropped by the DeadlineWrapper.

Pattern: Command Executor (executes tool calls as commands)
Pattern: Fail-fast validation with graceful error wrapping
"""

import logging
import time
from typing import Any, Optional, Union

from pydantic import ValidationError

from npm_helper.core.exceptions import (
    InvalidArgumentsError,
    NpmHelperException,
    UnknownOperationError,
    UpstreamTimeoutError,
)
from npm_helper.models.domain import (
    InvocationOutcome,
    OutcomeKind,
    RegisteredTool,
    ResponseEnvelope,
    ToolCall,
)
from npm_helper.observability.logging import correlation_id_context, get_logger
from npm_helper.observability.memory import MemoryMonitor
from npm_helper.observability.metrics import TOOL_CALLS_IN_PROGRESS, record_tool_call
from npm_helper.resilience.deadline import DeadlineWrapper
from npm_helper.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

# Default invocation budget in seconds
DEFAULT_TIMEOUT = 30.0

# Metric label for names outside the registered set
UNKNOWN_TOOL_LABEL = "unknown"


def validation_errors(exc: ValidationError) -> list[dict[str, Any]]:
    """
    Flatten a pydantic ValidationError into field/message/type dicts.

    Field paths use the wire (camelCase) names, dot-joined for nested
    locations; model-level errors are reported against "arguments".
    """
    errors = []
    for error in exc.errors(include_url=False):
        loc = ".".join(str(part) for part in error.get("loc", ()))
        errors.append(
            {
                "field": loc or "arguments",
                "message": error.get("msg", "invalid value"),
                "type": error.get("type", "value_error"),
            }
        )
    return errors


class ToolDispatcher:
    """
    Dispatcher for registered tools.

    Attributes:
        registry: The ToolRegistry to look up tools from.
        deadline: DeadlineWrapper enforcing the invocation budget.
        timeout: Default invocation budget in seconds.
        memory_monitor: Optional monitor checked after each invocation.

    Example:
        >>> dispatcher = ToolDispatcher(registry, DeadlineWrapper())
        >>> outcome = await dispatcher.dispatch(ToolCall(name="search_npm", arguments={"query": "react"}))
        >>> outcome.kind
        <OutcomeKind.SUCCESS: 'success'>
    """

    def __init__(
        self,
        registry: ToolRegistry,
        deadline: Optional[DeadlineWrapper] = None,
        timeout: float = DEFAULT_TIMEOUT,
        memory_monitor: Optional[MemoryMonitor] = None,
    ) -> None:
        self.registry = registry
        self.deadline = deadline or DeadlineWrapper()
        self.timeout = timeout
        self.memory_monitor = memory_monitor
        self._log = get_logger(__name__)

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def dispatch(
        self,
        tool_call: Union[ToolCall, str],
        arguments: Optional[dict[str, Any]] = None,
    ) -> InvocationOutcome:
        """
        Run one tool call to its terminal outcome.

        Never raises for runtime failures; protocol failures are returned as
        UNKNOWN_OPERATION / INVALID_ARGUMENTS outcomes.

        Args:
            tool_call: A ToolCall, or a tool name combined with arguments.
            arguments: Raw argument bag when tool_call is a name.

        Returns:
            The InvocationOutcome of the call.
        """
        if isinstance(tool_call, str):
            tool_call = ToolCall(name=tool_call, arguments=arguments or {})

        started = time.perf_counter()
        with correlation_id_context(tool_call.id):
            kind, text, errors = await self._settle(tool_call)
            elapsed = time.perf_counter() - started
            self._record(tool_call.name, kind, text, elapsed)

        if self.memory_monitor is not None:
            self.memory_monitor.check(f"after tool call ({tool_call.name})")

        return InvocationOutcome(
            kind=kind,
            tool_name=tool_call.name,
            call_id=tool_call.id,
            text=text,
            errors=errors,
            elapsed_seconds=elapsed,
        )

    async def call(
        self, name: str, arguments: Optional[dict[str, Any]] = None
    ) -> ResponseEnvelope:
        """
        Dispatch and convert the outcome into a ResponseEnvelope.

        Raises:
            UnknownOperationError: If name is not a registered tool.
            InvalidArgumentsError: If arguments fail the tool's schema.
        """
        outcome = await self.dispatch(ToolCall(name=name, arguments=arguments or {}))
        if outcome.kind is OutcomeKind.UNKNOWN_OPERATION:
            raise UnknownOperationError(name)
        if outcome.kind is OutcomeKind.INVALID_ARGUMENTS:
            raise InvalidArgumentsError(name, outcome.errors)
        return outcome.to_envelope()

    # =========================================================================
    # States
    # =========================================================================

    async def _settle(
        self, tool_call: ToolCall
    ) -> tuple[OutcomeKind, str, list[dict[str, Any]]]:
        # validating
        try:
            tool = self.registry.get(tool_call.name)
        except UnknownOperationError as e:
            return OutcomeKind.UNKNOWN_OPERATION, e.message, []

        try:
            arguments = tool.arguments_model.model_validate(tool_call.arguments)
        except ValidationError as e:
            error = InvalidArgumentsError(tool.name, validation_errors(e))
            return OutcomeKind.INVALID_ARGUMENTS, error.message, error.errors

        # invoking
        budget = self._budget(tool)
        try:
            with TOOL_CALLS_IN_PROGRESS.labels(tool=tool.name).track_inprogress():
                result = await self.deadline.run(
                    tool.handler(arguments),
                    budget,
                    label=f"Tool '{tool.name}'",
                    cancel_on_expiry=False,
                    timeout_message=f"Tool execution timed out after {budget:g}s",
                )
        except UpstreamTimeoutError as e:
            return OutcomeKind.TIMEOUT, e.message, []
        except NpmHelperException as e:
            return OutcomeKind.HANDLER_ERROR, e.message, []
        except Exception as e:
            logger.exception(f"Tool {tool.name} raised an unexpected error")
            return OutcomeKind.HANDLER_ERROR, str(e) or type(e).__name__, []

        # settled
        return OutcomeKind.SUCCESS, result if isinstance(result, str) else str(result), []

    def _budget(self, tool: RegisteredTool) -> float:
        return tool.timeout_seconds if tool.timeout_seconds is not None else self.timeout

    def _record(self, name: str, kind: OutcomeKind, text: str, elapsed: float) -> None:
        elapsed_ms = round(elapsed * 1000)
        label = name if self.registry.has(name) else UNKNOWN_TOOL_LABEL
        record_tool_call(label, kind.value, elapsed)

        if kind is OutcomeKind.SUCCESS:
            self._log.info("tool call completed", tool=name, elapsed_ms=elapsed_ms)
        elif kind.is_protocol_error:
            self._log.warning(
                "tool call rejected", tool=name, outcome=kind.value, error=text
            )
        else:
            self._log.error(
                "tool call failed",
                tool=name,
                outcome=kind.value,
                elapsed_ms=elapsed_ms,
                error=text,
            )
