"""Claude Code MCP server: exposes the Claude CLI as MCP tools."""

__version__ = "0.1.0"
