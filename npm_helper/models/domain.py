"""
Domain Models - operations, invocations and the response envelope.

This module contains the internal models shared by the tool registry, the
dispatcher and the MCP wiring:

- ToolDefinition: what a tool advertises (name, description, JSON Schema)
- RegisteredTool: a definition plus its argument model, handler and budget
- ToolCall: one invocation request from the caller
- InvocationOutcome: the tagged result of dispatching a ToolCall
- ResponseEnvelope: the only shape handed back for runtime results

Pattern: Domain models as value objects (frozen pydantic models)
"""

import uuid
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, Field


# =============================================================================
# ToolDefinition Model
# =============================================================================


class ToolDefinition(BaseModel):
    """
    Tool definition advertised through tools/list.

    Attributes:
        name: Unique tool identifier.
        description: Human-readable description of what the tool does.
        parameters: JSON Schema defining the tool's input parameters.
    """

    name: str = Field(..., description="Unique tool identifier")
    description: Optional[str] = Field(
        default=None, description="Human-readable description"
    )
    parameters: dict[str, Any] = Field(
        ..., description="JSON Schema for input parameters"
    )

    model_config = {"frozen": True}


# =============================================================================
# RegisteredTool Model (an Operation)
# =============================================================================


ToolHandler = Callable[[Any], Awaitable[str]]


class RegisteredTool(BaseModel):
    """
    A tool with its definition, argument model, handler and time budget.

    The handler receives the validated argument model instance, never the
    raw argument bag, and returns the display text of a successful call.

    Attributes:
        definition: The tool's metadata (name, description, parameters).
        arguments_model: Pydantic model the argument bag is validated against.
        handler: Coroutine function executing the tool.
        timeout_seconds: Invocation budget; None means the dispatcher default.

    Example:
        >>> tool = RegisteredTool.create(
        ...     name="get_package_versions",
        ...     description="Get available versions for an npm package",
        ...     arguments_model=GetPackageVersionsArgs,
        ...     handler=handlers.get_package_versions,
        ... )
    """

    definition: ToolDefinition
    arguments_model: type[BaseModel]
    handler: Callable[..., Any] = Field(..., description="Tool execution callable")
    timeout_seconds: Optional[float] = Field(default=None, gt=0.0)

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @classmethod
    def create(
        cls,
        name: str,
        description: str,
        arguments_model: type[BaseModel],
        handler: ToolHandler,
        timeout_seconds: Optional[float] = None,
    ) -> "RegisteredTool":
        """Build a tool whose advertised schema is derived from its argument model."""
        schema = arguments_model.model_json_schema(by_alias=True)
        schema.pop("title", None)
        return cls(
            definition=ToolDefinition(name=name, description=description, parameters=schema),
            arguments_model=arguments_model,
            handler=handler,
            timeout_seconds=timeout_seconds,
        )

    @property
    def name(self) -> str:
        """Get tool name from definition."""
        return self.definition.name

    @property
    def description(self) -> Optional[str]:
        """Get tool description from definition."""
        return self.definition.description

    @property
    def parameters(self) -> dict[str, Any]:
        """Get tool parameters from definition."""
        return self.definition.parameters


# =============================================================================
# ToolCall Model
# =============================================================================


class ToolCall(BaseModel):
    """
    A request to execute a specific tool with an untyped argument bag.

    Attributes:
        id: Correlation identifier (generated when not supplied).
        name: Name of the tool to execute.
        arguments: Raw arguments as received from the caller.
    """

    id: str = Field(default_factory=lambda: f"call_{uuid.uuid4().hex[:12]}")
    name: str = Field(..., description="Name of tool to execute")
    arguments: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


# =============================================================================
# Response Envelope
# =============================================================================


class ContentSegment(BaseModel):
    """One content item of an envelope. Only text is produced by this server."""

    type: str = "text"
    text: str

    model_config = {"frozen": True}


class ResponseEnvelope(BaseModel):
    """
    The normalized shape of every runtime result.

    is_error=True implies the text describes the failure; is_error=False
    implies the content is the handler's nominal output.
    """

    content: list[ContentSegment]
    is_error: bool = False

    model_config = {"frozen": True}

    @classmethod
    def text_result(cls, text: str, is_error: bool = False) -> "ResponseEnvelope":
        """Build a single-segment envelope."""
        return cls(content=[ContentSegment(text=text)], is_error=is_error)

    @property
    def text(self) -> str:
        """All text segments joined, in order."""
        return "\n".join(segment.text for segment in self.content)


# =============================================================================
# Invocation Outcome
# =============================================================================


class OutcomeKind(str, Enum):
    """Terminal states of one dispatched invocation."""

    SUCCESS = "success"
    HANDLER_ERROR = "handler_error"
    TIMEOUT = "timeout"
    INVALID_ARGUMENTS = "invalid_arguments"
    UNKNOWN_OPERATION = "unknown_operation"

    @property
    def is_protocol_error(self) -> bool:
        """Whether this state means the request itself was malformed."""
        return self in (OutcomeKind.INVALID_ARGUMENTS, OutcomeKind.UNKNOWN_OPERATION)


class InvocationOutcome(BaseModel):
    """
    Tagged result of one dispatch, carried explicitly between layers.

    Attributes:
        kind: Which terminal state the invocation reached.
        tool_name: Requested tool name.
        call_id: Correlation id of the originating ToolCall.
        text: Handler output on success, otherwise the failure description.
        errors: Structured validation detail for INVALID_ARGUMENTS.
        elapsed_seconds: Wall-clock time spent in the dispatcher.
    """

    kind: OutcomeKind
    tool_name: str
    call_id: str
    text: str
    errors: list[dict[str, Any]] = Field(default_factory=list)
    elapsed_seconds: float = 0.0

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def to_envelope(self) -> ResponseEnvelope:
        """
        Convert a runtime outcome into a ResponseEnvelope.

        Raises:
            ValueError: For protocol-level outcomes, which have no envelope.
        """
        if self.kind.is_protocol_error:
            raise ValueError(f"{self.kind.value} outcomes are reported as protocol errors")
        return ResponseEnvelope.text_result(self.text, is_error=not self.ok)
