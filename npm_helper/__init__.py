"""npm Helper MCP Server.

Package discovery and dependency maintenance tools for MCP clients:
registry search, versions, details and page content, plus npm-check-updates
operations on a project's package.json.

Run with the ``npm-helper-mcp`` console script or ``python -m npm_helper.main``.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
