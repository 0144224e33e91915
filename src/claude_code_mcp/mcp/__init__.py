"""
MCP (Model Context Protocol) server that forwards code tasks to the
Claude CLI.

Architecture:
- server.py: FastMCP server initialization and lifecycle
- config.py: Configuration and the running-server registry
- dispatcher.py: Routes tool calls to prompts and command runs
- prompts.py: Prompt templates and input truncation
- runner.py: Subprocess execution with timeout
- codec.py: Base64 text helpers
- tools/: Tool definitions and FastMCP bindings
"""

__all__ = [
    "MCPServer",
    "ProcessRunner",
    "ServerConfig",
    "ServerRegistry",
    "ToolDispatcher",
    "ToolResponse",
]

from .config import ServerConfig, ServerRegistry
from .dispatcher import ToolDispatcher, ToolResponse
from .runner import ProcessRunner
from .server import MCPServer
