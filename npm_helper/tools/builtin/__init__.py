"""
Built-in Tools Package

The ten tools the server exposes:
- packages: registry-backed search, page content, versions and details
- updates: npm-check-updates operations on a package.json
"""

from typing import Optional

from npm_helper.clients.ncu import NpmCheckUpdatesRunner
from npm_helper.clients.registry import NpmRegistryClient
from npm_helper.core.config import Settings
from npm_helper.tools.builtin.packages import PackageTools
from npm_helper.tools.builtin.updates import UpdateTools
from npm_helper.tools.registry import ToolRegistry


def register_builtin_tools(
    registry: ToolRegistry,
    registry_client: NpmRegistryClient,
    ncu_runner: NpmCheckUpdatesRunner,
    settings: Optional[Settings] = None,
    cwd: Optional[str] = None,
) -> None:
    """
    Register all built-in tools with the given registry.

    Args:
        registry: The ToolRegistry to register tools with.
        registry_client: Paced client shared by the registry-backed tools.
        ncu_runner: Runner shared by the update tools.
        settings: Shaping bounds for the registry-backed tools.
        cwd: Base directory for relative package.json paths.
    """
    tools = [
        *PackageTools(registry_client, settings).tools(),
        *UpdateTools(ncu_runner, cwd=cwd).tools(),
    ]
    for tool in tools:
        registry.register(tool.name, tool)


__all__ = [
    "PackageTools",
    "UpdateTools",
    "register_builtin_tools",
]
