"""
FastMCP server initialization and configuration.

Main server class that wires the process runner, tool dispatcher and
FastMCP app together from a ServerConfig, and serves over stdio.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from fastmcp import FastMCP

from .config import ServerConfig
from .dispatcher import ToolDispatcher
from .runner import ProcessRunner
from .tools.code_tools import register_code_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "claude-code-server"


@dataclass
class MCPServer:
    """
    MCP server exposing the Claude CLI as a set of code tools.

    Attributes:
        config: Validated server configuration
        runner: Process runner (built from config if not given)
        dispatcher: Tool dispatcher (built from runner if not given)
    """

    config: ServerConfig
    runner: Optional[ProcessRunner] = None
    dispatcher: Optional[ToolDispatcher] = None
    _app: Optional[FastMCP] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        """Build collaborators and register tools."""
        if self.runner is None:
            self.runner = ProcessRunner(
                executable=self.config.claude_bin,
                timeout=self.config.timeout,
            )
        if self.dispatcher is None:
            self.dispatcher = ToolDispatcher(
                runner=self.runner,
                max_input_length=self.config.max_input_length,
            )

        self._app = FastMCP(SERVER_NAME)
        register_code_tools(self._app, self.dispatcher)

    @property
    def app(self) -> FastMCP:
        return self._app

    def check_cli(self) -> Optional[str]:
        """
        Log the Claude CLI version.

        Failure is logged and not fatal; the same error resurfaces per
        request if the binary is really unusable.

        Returns:
            Version string, or None if the probe failed
        """
        try:
            version = asyncio.run(self.runner.probe_version())
        except Exception as e:
            logger.warning(
                "Claude CLI (%s) could not be executed: %s", self.config.claude_bin, e
            )
            return None

        logger.info("Claude CLI found: %s", version)
        return version

    def start(self):
        """
        Serve MCP over stdio until the client disconnects.

        Raises:
            RuntimeError: If FastMCP fails to start
        """
        if not self._app:
            raise RuntimeError("FastMCP app not initialized. This should not happen.")

        logger.info("Claude Code MCP server running on stdio")
        try:
            self._app.run()
        except Exception as e:
            raise RuntimeError(f"Failed to start MCP server with stdio transport: {e}") from e
        finally:
            self.shutdown()

    def shutdown(self):
        """Kill in-flight commands. Safe to call more than once."""
        self.dispatcher.shutdown()
