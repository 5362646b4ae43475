"""
Tools Package - registry, dispatcher and built-in tools.
"""

from npm_helper.tools.builtin import register_builtin_tools
from npm_helper.tools.executor import ToolDispatcher
from npm_helper.tools.registry import ToolRegistry

__all__ = [
    "ToolDispatcher",
    "ToolRegistry",
    "register_builtin_tools",
]
