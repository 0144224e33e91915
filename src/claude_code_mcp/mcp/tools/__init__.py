"""
MCP tool definitions for the Claude Code server.

definitions.py holds the static tool table; code_tools.py binds each
entry to a FastMCP handler backed by the ToolDispatcher.
"""

from .definitions import (
    TOOL_DEFINITIONS,
    TOOL_NAMES,
    ToolDefinition,
    ToolParameter,
    get_tool_definition,
)

__all__ = [
    "TOOL_DEFINITIONS",
    "TOOL_NAMES",
    "ToolDefinition",
    "ToolParameter",
    "get_tool_definition",
]
