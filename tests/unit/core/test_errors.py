"""
Unit tests for npm_helper/core/exceptions.py - exception hierarchy.
"""

import pytest

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


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_class",
        [
            UnknownOperationError,
            InvalidArgumentsError,
            UpstreamHttpError,
            UpstreamTimeoutError,
            UpstreamRequestError,
            HandlerFailure,
            ManifestNotFoundError,
            ResolverError,
        ],
    )
    def test_all_inherit_from_base(self, exc_class) -> None:
        assert issubclass(exc_class, NpmHelperException)

    def test_protocol_errors(self) -> None:
        assert issubclass(UnknownOperationError, ProtocolError)
        assert issubclass(InvalidArgumentsError, ProtocolError)
        assert not issubclass(HandlerFailure, ProtocolError)

    def test_manifest_and_resolver_are_handler_failures(self) -> None:
        assert issubclass(ManifestNotFoundError, HandlerFailure)
        assert issubclass(ResolverError, HandlerFailure)


class TestMessages:
    def test_base_defaults(self) -> None:
        exc = NpmHelperException("something broke")
        assert str(exc) == "something broke"
        assert exc.error_code == ErrorCode.NPM_HELPER_ERROR

    def test_extra_kwargs_become_attributes(self) -> None:
        exc = NpmHelperException("x", detail="more")
        assert exc.detail == "more"

    def test_unknown_operation(self) -> None:
        exc = UnknownOperationError("bogus_tool")
        assert str(exc) == "Unknown tool: bogus_tool"
        assert exc.error_code == ErrorCode.UNKNOWN_OPERATION

    def test_invalid_arguments_lists_fields(self) -> None:
        exc = InvalidArgumentsError(
            "search_npm",
            [
                {"field": "query", "message": "Field required", "type": "missing"},
                {"field": "maxResults", "message": "Input should be a valid integer", "type": "int_type"},
            ],
        )
        assert str(exc) == (
            "Invalid arguments for search_npm: query: Field required; "
            "maxResults: Input should be a valid integer"
        )
        assert exc.fields == ["query", "maxResults"]

    def test_http_error(self) -> None:
        exc = UpstreamHttpError(404, url="https://registry.npmjs.org/x")
        assert str(exc) == "HTTP error! Status: 404"
        assert exc.status_code == 404

    def test_timeout_default_message(self) -> None:
        exc = UpstreamTimeoutError("Request to https://registry.npmjs.org/react", 15.0)
        assert str(exc) == "Request to https://registry.npmjs.org/react timed out after 15s"

    def test_manifest_not_found(self) -> None:
        exc = ManifestNotFoundError("/app/package.json")
        assert str(exc) == "Package file not found: /app/package.json"
        assert exc.error_code == ErrorCode.HANDLER_FAILURE

    def test_resolver_error(self) -> None:
        exc = ResolverError("exit 1", exit_code=1)
        assert str(exc) == "NCU execution failed: exit 1"
        assert exc.exit_code == 1


class TestAddContext:
    def test_prefix_applied_and_type_kept(self) -> None:
        exc = UpstreamHttpError(500).add_context("Error searching npm packages")

        assert isinstance(exc, UpstreamHttpError)
        assert exc.message == "Error searching npm packages: HTTP error! Status: 500"
        assert str(exc) == exc.message
