"""
FastMCP bindings for the Claude Code tools.

Each tool is a thin async wrapper that forwards its arguments to the
ToolDispatcher and converts the response into MCP text content.

Handler parameters are annotated from the static definitions, so the
schema FastMCP advertises carries each parameter's description. Dispatch
errors are converted to ToolError here, so the protocol layer reports
``[<code>] <message>`` and never a raw exception.
"""

import logging
from typing import Annotated, Any, Dict

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from mcp.types import TextContent
from pydantic import Field

from claude_code_mcp.mcp.dispatcher import ToolDispatcher
from claude_code_mcp.mcp.errors import DispatchError

from .definitions import TOOL_DEFINITIONS, get_tool_definition

logger = logging.getLogger(__name__)


async def call_dispatcher(
    dispatcher: ToolDispatcher, name: str, arguments: Dict[str, Any]
):
    """Run one tool call and convert the result for FastMCP."""
    try:
        response = await dispatcher.call_tool(name, arguments)
    except DispatchError as e:
        logger.error("Tool %s failed [%d]: %s", name, e.code, e.message)
        raise ToolError(f"[{int(e.code)}] {e.message}") from e

    return [TextContent(type="text", text=item["text"]) for item in response.content]


def described_parameters(tool_name: str) -> Dict[str, Any]:
    """Map each parameter of a tool to an annotated type carrying its description."""
    return {
        parameter.name: Annotated[str, Field(description=parameter.description)]
        for parameter in get_tool_definition(tool_name).parameters
    }


def register_code_tools(mcp_server: FastMCP, dispatcher: ToolDispatcher) -> None:
    """
    Register every Claude Code tool with a FastMCP server.

    Args:
        mcp_server: FastMCP server instance to register tools with
        dispatcher: Dispatcher that executes the calls
    """

    def _register(handler):
        definition = get_tool_definition(handler.__name__)
        mcp_server.tool(name=definition.name, description=definition.description)(handler)
        return handler

    explain_params = described_parameters("explain_code")
    review_params = described_parameters("review_code")
    fix_params = described_parameters("fix_code")
    edit_params = described_parameters("edit_code")
    test_params = described_parameters("test_code")
    simulate_params = described_parameters("simulate_command")
    query_params = described_parameters("your_own_query")

    @_register
    async def explain_code(
        code: explain_params["code"], context: explain_params["context"] = ""
    ):
        return await call_dispatcher(
            dispatcher, "explain_code", {"code": code, "context": context}
        )

    @_register
    async def review_code(
        code: review_params["code"], focus_areas: review_params["focus_areas"] = ""
    ):
        return await call_dispatcher(
            dispatcher, "review_code", {"code": code, "focus_areas": focus_areas}
        )

    @_register
    async def fix_code(
        code: fix_params["code"], issue_description: fix_params["issue_description"]
    ):
        return await call_dispatcher(
            dispatcher,
            "fix_code",
            {"code": code, "issue_description": issue_description},
        )

    @_register
    async def edit_code(
        code: edit_params["code"], instructions: edit_params["instructions"]
    ):
        return await call_dispatcher(
            dispatcher, "edit_code", {"code": code, "instructions": instructions}
        )

    @_register
    async def test_code(
        code: test_params["code"], test_framework: test_params["test_framework"] = ""
    ):
        return await call_dispatcher(
            dispatcher, "test_code", {"code": code, "test_framework": test_framework}
        )

    @_register
    async def simulate_command(
        command: simulate_params["command"], input: simulate_params["input"] = ""
    ):
        return await call_dispatcher(
            dispatcher, "simulate_command", {"command": command, "input": input}
        )

    @_register
    async def your_own_query(
        query: query_params["query"], context: query_params["context"] = ""
    ):
        return await call_dispatcher(
            dispatcher, "your_own_query", {"query": query, "context": context}
        )

    logger.info("Registered %d Claude Code tools with MCP server", len(TOOL_DEFINITIONS))
