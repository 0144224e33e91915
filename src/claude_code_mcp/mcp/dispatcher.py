"""
Tool dispatcher: routes a tool request to its prompt and command run.

Per request: Received -> Validated -> Prompt-Built -> Process-Invoked ->
Responded | Failed. Anything raised after validation is logged and
re-raised as ToolExecutionError so the protocol layer only ever sees
DispatchError subclasses.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from .errors import (
    DispatchError,
    MissingArgumentError,
    ToolExecutionError,
    ToolNotFoundError,
)
from .prompts import DEFAULT_MAX_INPUT_LENGTH, build_prompt
from .runner import PRINT_MODE_FLAG, ProcessRunner
from .tools.definitions import TOOL_DEFINITIONS, ToolDefinition, get_tool_definition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolRequest:
    """Inbound "call tool" request."""

    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Read-only private copy
        object.__setattr__(self, "arguments", MappingProxyType(dict(self.arguments or {})))


@dataclass
class ToolResponse:
    """Response envelope: ordered list of text content entries."""

    content: List[Dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> "ToolResponse":
        return cls(content=[{"type": "text", "text": text}])

    @property
    def text(self) -> str:
        return "".join(item["text"] for item in self.content)


class ToolDispatcher:
    """Maps tool requests onto Claude CLI invocations."""

    def __init__(
        self,
        runner: ProcessRunner,
        max_input_length: int = DEFAULT_MAX_INPUT_LENGTH,
    ):
        self.runner = runner
        self.max_input_length = max_input_length

    def list_tools(self) -> List[ToolDefinition]:
        """Return the static tool table."""
        return list(TOOL_DEFINITIONS)

    async def call_tool(
        self, name: str, arguments: Optional[Mapping[str, Any]] = None
    ) -> ToolResponse:
        """
        Execute one tool call.

        Args:
            name: Tool name
            arguments: Tool arguments

        Returns:
            ToolResponse holding the command's trimmed stdout

        Raises:
            ToolNotFoundError: If name is not an enumerated tool
            ToolExecutionError: If prompt building or the command fails
        """
        return await self.dispatch(ToolRequest(name=name, arguments=arguments or {}))

    async def dispatch(self, request: ToolRequest) -> ToolResponse:
        definition = get_tool_definition(request.name)
        if definition is None:
            logger.error("Unknown tool requested: %s", request.name)
            raise ToolNotFoundError(request.name)

        try:
            self._check_required(definition, request.arguments)
            prompt = build_prompt(request.name, request.arguments, self.max_input_length)
            output = await self.runner.run([PRINT_MODE_FLAG], input_text=prompt)
        except DispatchError:
            raise
        except Exception as e:
            logger.exception("Error in %s", request.name)
            raise ToolExecutionError(str(e)) from e

        return ToolResponse.from_text(output)

    @staticmethod
    def _check_required(definition: ToolDefinition, arguments: Mapping[str, Any]) -> None:
        for key in definition.required:
            value = arguments.get(key)
            if value is None or value == "":
                raise MissingArgumentError(definition.name, key)

    def shutdown(self) -> None:
        """Kill any command still in flight."""
        self.runner.shutdown()
