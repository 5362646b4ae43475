"""
Core module for the npm helper MCP server.

This module contains configuration, exceptions, and shared utilities.
"""

from npm_helper.core.config import Settings, get_settings
from npm_helper.core.exceptions import (
    ErrorCode,
    HandlerFailure,
    InvalidArgumentsError,
    ManifestNotFoundError,
    NpmHelperException,
    ProtocolError,
    ResolverError,
    UnknownOperationError,
    UpstreamHttpError,
    UpstreamRequestError,
    UpstreamTimeoutError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "ErrorCode",
    "NpmHelperException",
    "ProtocolError",
    "InvalidArgumentsError",
    "UnknownOperationError",
    "UpstreamHttpError",
    "UpstreamTimeoutError",
    "UpstreamRequestError",
    "HandlerFailure",
    "ManifestNotFoundError",
    "ResolverError",
]
