"""
Custom exceptions for the npm helper MCP server.

This module provides the exception hierarchy used across the server. All
exceptions inherit from NpmHelperException and carry an ErrorCode so the
dispatcher can classify failures without string matching.

Two families exist:
- Protocol errors (InvalidArgumentsError, UnknownOperationError) describe a
  malformed request and surface as JSON-RPC errors.
- Runtime errors (everything else) surface as isError tool results.
"""

from enum import Enum
from typing import Any, Optional


# =============================================================================
# Error Codes Enum
# =============================================================================


class ErrorCode(str, Enum):
    """Machine-readable codes for every failure kind."""

    NPM_HELPER_ERROR = "NPM_HELPER_ERROR"
    INVALID_ARGUMENTS = "INVALID_ARGUMENTS"
    UNKNOWN_OPERATION = "UNKNOWN_OPERATION"
    UPSTREAM_HTTP_ERROR = "UPSTREAM_HTTP_ERROR"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    UPSTREAM_REQUEST_ERROR = "UPSTREAM_REQUEST_ERROR"
    HANDLER_FAILURE = "HANDLER_FAILURE"


# =============================================================================
# Base Exception
# =============================================================================


class NpmHelperException(Exception):
    """
    Base exception for all npm helper errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code from ErrorCode enum.
    """

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.NPM_HELPER_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code

        for key, value in kwargs.items():
            setattr(self, key, value)

    def add_context(self, prefix: str) -> "NpmHelperException":
        """
        Prefix the message with what the caller was doing; returns self.

        Example:
            >>> raise error.add_context("Error fetching package versions")
        """
        self.message = f"{prefix}: {self.message}"
        self.args = (self.message,)
        return self


# =============================================================================
# Protocol Errors
# =============================================================================


class ProtocolError(NpmHelperException):
    """Marker base for errors that mean the request itself was malformed."""


class UnknownOperationError(ProtocolError):
    """
    Raised when a tool name is not part of the registered operation set.

    Attributes:
        tool_name: The name the caller asked for.
    """

    def __init__(self, tool_name: str) -> None:
        super().__init__(
            f"Unknown tool: {tool_name}",
            error_code=ErrorCode.UNKNOWN_OPERATION,
        )
        self.tool_name = tool_name


class InvalidArgumentsError(ProtocolError):
    """
    Raised when an argument bag fails validation against the tool schema.

    Attributes:
        tool_name: Name of the tool whose schema rejected the arguments.
        errors: List of {"field", "message", "type"} dicts, one per problem.
    """

    def __init__(self, tool_name: str, errors: list[dict[str, Any]]) -> None:
        self.tool_name = tool_name
        self.errors = errors
        details = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        super().__init__(
            f"Invalid arguments for {tool_name}: {details or 'validation failed'}",
            error_code=ErrorCode.INVALID_ARGUMENTS,
        )

    @property
    def fields(self) -> list[str]:
        """Names of the offending fields, in report order."""
        return [e["field"] for e in self.errors]


# =============================================================================
# Upstream Errors
# =============================================================================


class UpstreamHttpError(NpmHelperException):
    """
    Raised when the registry or website answers with a non-success status.

    Attributes:
        status_code: HTTP status code returned upstream.
        url: The requested URL.
    """

    def __init__(self, status_code: int, url: Optional[str] = None) -> None:
        super().__init__(
            f"HTTP error! Status: {status_code}",
            error_code=ErrorCode.UPSTREAM_HTTP_ERROR,
        )
        self.status_code = status_code
        self.url = url


class UpstreamTimeoutError(NpmHelperException):
    """
    Raised when a deadline fires before the wrapped operation settles.

    Attributes:
        label: What timed out (a URL or a tool name).
        timeout_seconds: The budget that was exceeded.
    """

    def __init__(self, label: str, timeout_seconds: float, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"{label} timed out after {timeout_seconds:g}s",
            error_code=ErrorCode.UPSTREAM_TIMEOUT,
        )
        self.label = label
        self.timeout_seconds = timeout_seconds


class UpstreamRequestError(NpmHelperException):
    """Raised when a request fails at the transport level (DNS, connect, TLS)."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message, error_code=ErrorCode.UPSTREAM_REQUEST_ERROR)
        self.url = url


# =============================================================================
# Handler Failures
# =============================================================================


class HandlerFailure(NpmHelperException):
    """Raised by a tool handler for any failure it cannot recover from."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, error_code=ErrorCode.HANDLER_FAILURE, **kwargs)


class ManifestNotFoundError(HandlerFailure):
    """
    Raised when the package.json to operate on does not exist.

    Attributes:
        path: The fully resolved path that was checked.
    """

    def __init__(self, path: str) -> None:
        super().__init__(f"Package file not found: {path}")
        self.path = path


class ResolverError(HandlerFailure):
    """Raised when npm-check-updates fails or returns unusable output."""

    def __init__(self, message: str, exit_code: Optional[int] = None) -> None:
        super().__init__(f"NCU execution failed: {message}")
        self.exit_code = exit_code
