"""
Unit tests for npm_helper/tools/registry.py - ToolRegistry.
"""

import importlib

import pytest

import npm_helper.tools.registry as registry_module
from npm_helper.core.exceptions import UnknownOperationError
from npm_helper.models.domain import RegisteredTool, ToolDefinition
from npm_helper.models.tools import SearchNpmArgs
from npm_helper.tools.registry import ToolRegistry


async def _handler(args) -> str:
    return "ok"


@pytest.fixture
def registry() -> ToolRegistry:
    """Create a fresh ToolRegistry for each test."""
    return ToolRegistry()


@pytest.fixture
def search_tool() -> RegisteredTool:
    return RegisteredTool.create(
        name="search_npm",
        description="Search for npm packages",
        arguments_model=SearchNpmArgs,
        handler=_handler,
    )


class TestToolRegistry:
    def test_register_and_get(self, registry: ToolRegistry, search_tool: RegisteredTool) -> None:
        registry.register("search_npm", search_tool)

        assert registry.get("search_npm") is search_tool
        assert registry.has("search_npm")
        assert len(registry) == 1

    def test_get_unknown_raises(self, registry: ToolRegistry) -> None:
        with pytest.raises(UnknownOperationError) as exc_info:
            registry.get("bogus_tool")

        assert exc_info.value.tool_name == "bogus_tool"
        assert str(exc_info.value) == "Unknown tool: bogus_tool"

    def test_has_unknown_is_false(self, registry: ToolRegistry) -> None:
        assert registry.has("bogus_tool") is False

    def test_duplicate_registration_rejected(
        self, registry: ToolRegistry, search_tool: RegisteredTool
    ) -> None:
        registry.register("search_npm", search_tool)
        with pytest.raises(ValueError, match="already registered"):
            registry.register("search_npm", search_tool)

    def test_name_must_match_definition(
        self, registry: ToolRegistry, search_tool: RegisteredTool
    ) -> None:
        with pytest.raises(ValueError):
            registry.register("other_name", search_tool)

    def test_list_returns_definitions_in_registration_order(self, registry: ToolRegistry) -> None:
        for name in ("b_tool", "a_tool", "c_tool"):
            registry.register(
                name,
                RegisteredTool.create(name, f"{name} tool", SearchNpmArgs, _handler),
            )

        definitions = registry.list()

        assert all(isinstance(d, ToolDefinition) for d in definitions)
        assert [d.name for d in definitions] == ["b_tool", "a_tool", "c_tool"]
        assert registry.names() == ["b_tool", "a_tool", "c_tool"]


class TestRegisteredToolSchema:
    """Advertised schemas are derived from the argument models."""

    def test_schema_uses_wire_names(self, search_tool: RegisteredTool) -> None:
        schema = search_tool.parameters

        assert schema["type"] == "object"
        assert set(schema["properties"]) == {"query", "maxResults"}
        assert schema["required"] == ["query"]
        assert "title" not in schema

    def test_default_exposed(self, search_tool: RegisteredTool) -> None:
        assert search_tool.parameters["properties"]["maxResults"]["default"] == 10


class TestRegistryModule:
    def test_class_body_executes(self) -> None:
        # ToolRegistry.list shadows the builtin inside the class body;
        # re-running the body must not evaluate list[...] against it.
        reloaded = importlib.reload(registry_module)

        registry = reloaded.ToolRegistry()
        assert registry.names() == []
        assert registry.list() == []
