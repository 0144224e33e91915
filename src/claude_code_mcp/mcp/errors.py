"""
Exception hierarchy for the Claude Code MCP server.

Process-level failures (timeouts, non-zero exits) are raised by the
process runner. The tool dispatcher catches everything at its boundary
and re-raises a DispatchError carrying one of two classifications, so
callers never see raw system exceptions.
"""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Classification attached to every error leaving the dispatcher."""

    NOT_FOUND = 404
    INTERNAL_ERROR = 500


class ConfigurationError(ValueError):
    """Raised when server configuration is missing or invalid at startup."""


class MissingArgumentError(ValueError):
    """Raised when a required tool argument is absent or empty."""

    def __init__(self, tool_name: str, argument: str):
        self.tool_name = tool_name
        self.argument = argument
        super().__init__(
            f"Missing required argument '{argument}' for tool '{tool_name}'"
        )


class ProcessRunnerError(RuntimeError):
    """Base class for failures of a spawned command."""


class ProcessTimeoutError(ProcessRunnerError):
    """Raised when a command exceeds its wall-clock timeout and is killed."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Command timed out after {timeout:g} seconds")


class ProcessExitError(ProcessRunnerError):
    """Raised when a command exits with a non-zero status."""

    def __init__(self, returncode: int, stderr: str):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command failed with code {returncode}: {stderr}")


class DispatchError(Exception):
    """Error surfaced to MCP callers by the tool dispatcher."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ToolNotFoundError(DispatchError):
    """Raised when a request names a tool outside the enumerated set."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}")


class ToolExecutionError(DispatchError):
    """Raised when prompt building or command execution fails."""

    code = ErrorCode.INTERNAL_ERROR
