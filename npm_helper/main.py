"""
npm Helper MCP Server - entry point and wiring.

Builds the shared request-gating state, registers the ten tools and serves
them over MCP on stdio. stdout carries the protocol; logs go to stderr.

- tools/list advertises every registered tool with its JSON Schema.
- tools/call dispatches through ToolDispatcher. Unknown tools and invalid
  arguments are answered with JSON-RPC errors; runtime failures are answered
  with a CallToolResult whose isError flag is set.
"""

import asyncio
import contextlib
import logging
import sys
from dataclasses import dataclass
from typing import Optional

import httpx
from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from npm_helper import __version__
from npm_helper.clients.http import create_http_client
from npm_helper.clients.ncu import NpmCheckUpdatesRunner
from npm_helper.clients.registry import NpmRegistryClient
from npm_helper.core.config import Settings, get_settings
from npm_helper.models.domain import OutcomeKind, ToolCall
from npm_helper.observability.logging import configure_logging
from npm_helper.observability.memory import MemoryMonitor, log_initial_usage
from npm_helper.resilience.deadline import DeadlineWrapper
from npm_helper.resilience.pacing import PacedGate
from npm_helper.tools.builtin import register_builtin_tools
from npm_helper.tools.executor import ToolDispatcher
from npm_helper.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


# =============================================================================
# Shared State
# =============================================================================


@dataclass
class GateState:
    """
    Process-wide collaborators shared by every tool invocation.

    Built once at startup and passed explicitly to whatever needs it.
    """

    gate: PacedGate
    deadline: DeadlineWrapper
    http: httpx.AsyncClient
    memory: MemoryMonitor

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "GateState":
        return cls(
            gate=PacedGate(requests_per_second=settings.requests_per_second),
            deadline=DeadlineWrapper(),
            http=create_http_client(user_agent=settings.user_agent, transport=transport),
            memory=MemoryMonitor(
                threshold_mb=settings.memory_threshold_mb,
                cooldown_seconds=settings.memory_reclaim_cooldown_seconds,
            ),
        )

    async def aclose(self) -> None:
        await self.http.aclose()


def build_dispatcher(
    state: GateState,
    settings: Optional[Settings] = None,
    ncu_runner: Optional[NpmCheckUpdatesRunner] = None,
    cwd: Optional[str] = None,
) -> ToolDispatcher:
    """
    Register the built-in tools and return a dispatcher over them.

    Args:
        state: Shared gate, deadline wrapper, http client and memory monitor.
        settings: Application settings (default: get_settings()).
        ncu_runner: npm-check-updates runner (default: from settings).
        cwd: Base directory for relative package.json paths.
    """
    settings = settings or get_settings()
    registry = ToolRegistry()
    register_builtin_tools(
        registry,
        NpmRegistryClient(state.http, state.gate, state.deadline, settings),
        ncu_runner or NpmCheckUpdatesRunner(settings.ncu_command),
        settings,
        cwd=cwd,
    )
    return ToolDispatcher(
        registry,
        state.deadline,
        timeout=settings.tool_timeout_seconds,
        memory_monitor=state.memory,
    )


# =============================================================================
# MCP Server
# =============================================================================


def create_server(dispatcher: ToolDispatcher, name: str = "npm-helper-mcp") -> Server:
    """
    Create the MCP server and register the tools/list and tools/call handlers.

    tools/call is registered as a raw request handler: the decorator form
    turns every exception into an isError result, which would hide protocol
    errors from the client.
    """
    server: Server = Server(name, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=definition.name,
                description=definition.description,
                inputSchema=definition.parameters,
            )
            for definition in dispatcher.registry.list()
        ]

    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        call = ToolCall(name=request.params.name, arguments=request.params.arguments or {})
        outcome = await dispatcher.dispatch(call)

        if outcome.kind is OutcomeKind.UNKNOWN_OPERATION:
            raise McpError(types.ErrorData(code=types.METHOD_NOT_FOUND, message=outcome.text))
        if outcome.kind is OutcomeKind.INVALID_ARGUMENTS:
            raise McpError(
                types.ErrorData(
                    code=types.INVALID_PARAMS,
                    message=outcome.text,
                    data={"errors": outcome.errors},
                )
            )

        envelope = outcome.to_envelope()
        return types.ServerResult(
            types.CallToolResult(
                content=[
                    types.TextContent(type="text", text=segment.text)
                    for segment in envelope.content
                ],
                isError=envelope.is_error,
            )
        )

    server.request_handlers[types.CallToolRequest] = call_tool
    return server


# =============================================================================
# Entry Points
# =============================================================================


async def run(settings: Optional[Settings] = None) -> None:
    """Run the MCP server over stdio until the client disconnects."""
    settings = settings or get_settings()
    state = GateState.from_settings(settings)
    dispatcher = build_dispatcher(state, settings)
    server = create_server(dispatcher, name=settings.service_name)

    log_initial_usage(state.memory)
    monitor = state.memory.start(settings.memory_check_interval_seconds)
    logger.info(
        f"{settings.service_name} {__version__} serving {len(dispatcher.registry)} tools on stdio "
        f"(registry requests paced {settings.min_request_interval:.2f}s apart)"
    )
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    finally:
        monitor.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await monitor
        await state.aclose()
        logger.info("Server stopped")


def main() -> None:
    """Console entry point (npm-helper-mcp)."""
    settings = get_settings()
    configure_logging(level=settings.log_level, json_output=settings.log_json)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception as e:
        logger.critical(f"Fatal error running server: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
