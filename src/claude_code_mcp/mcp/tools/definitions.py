"""
Static tool definitions exposed by the Claude Code MCP server.

The table is built once at import time and never mutated. code_tools.py
annotates each FastMCP handler from it, so the names, descriptions and
required flags here are what MCP clients see in "list tools".
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class ToolParameter:
    """Single argument accepted by a tool."""

    name: str
    description: str
    required: bool = True
    default: Optional[str] = None
    type: str = "string"


@dataclass(frozen=True)
class ToolDefinition:
    """
    Name, description and argument schema of one tool.

    Attributes:
        name: Tool identifier used in "call tool" requests
        description: Human-readable description shown to MCP clients
        parameters: Ordered argument definitions
    """

    name: str
    description: str
    parameters: Tuple[ToolParameter, ...] = field(default_factory=tuple)

    @property
    def required(self) -> List[str]:
        return [p.name for p in self.parameters if p.required]

    @property
    def optional(self) -> List[str]:
        return [p.name for p in self.parameters if not p.required]


TOOL_DEFINITIONS: Tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="explain_code",
        description="Provide a detailed explanation of the given code",
        parameters=(
            ToolParameter("code", "Code to explain"),
            ToolParameter("context", "Additional context", required=False, default=""),
        ),
    ),
    ToolDefinition(
        name="review_code",
        description="Review the given code",
        parameters=(
            ToolParameter("code", "Code to review"),
            ToolParameter(
                "focus_areas", "Areas the review should focus on", required=False, default=""
            ),
        ),
    ),
    ToolDefinition(
        name="fix_code",
        description="Fix bugs or resolve an issue in the given code",
        parameters=(
            ToolParameter("code", "Code to fix"),
            ToolParameter("issue_description", "Description of the issue"),
        ),
    ),
    ToolDefinition(
        name="edit_code",
        description="Edit the given code or add functionality to it",
        parameters=(
            ToolParameter("code", "Code to edit"),
            ToolParameter("instructions", "Editing instructions"),
        ),
    ),
    ToolDefinition(
        name="test_code",
        description="Generate tests for the given code",
        parameters=(
            ToolParameter("code", "Code to test"),
            ToolParameter(
                "test_framework", "Test framework to use", required=False, default=""
            ),
        ),
    ),
    ToolDefinition(
        name="simulate_command",
        description=(
            "Predict the result of running a command without executing it. "
            "Given a command and its input, returns what running it would be "
            "expected to do, which makes it usable as a safety check."
        ),
        parameters=(
            ToolParameter("command", "Command to simulate"),
            ToolParameter("input", "Input data for the command", required=False, default=""),
        ),
    ),
    ToolDefinition(
        name="your_own_query",
        description=(
            "Send a free-form query. The host supplies its own question "
            "and optional context."
        ),
        parameters=(
            ToolParameter("query", "Query text"),
            ToolParameter("context", "Additional context", required=False, default=""),
        ),
    ),
)

TOOL_NAMES: Tuple[str, ...] = tuple(t.name for t in TOOL_DEFINITIONS)

_BY_NAME: Dict[str, ToolDefinition] = {t.name: t for t in TOOL_DEFINITIONS}


def get_tool_definition(name: str) -> Optional[ToolDefinition]:
    """Look up a tool definition by name, or None if unknown."""
    return _BY_NAME.get(name)
