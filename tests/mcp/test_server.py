"""Tests for MCPServer wiring and the FastMCP tool surface."""

from pathlib import Path
from unittest.mock import patch

import pytest
from fastmcp.client import Client
from fastmcp.exceptions import ToolError
from mcp.shared.exceptions import McpError

from claude_code_mcp.mcp.config import ServerConfig
from claude_code_mcp.mcp.dispatcher import ToolDispatcher
from claude_code_mcp.mcp.errors import ProcessExitError
from claude_code_mcp.mcp.runner import ProcessRunner
from claude_code_mcp.mcp.server import MCPServer
from claude_code_mcp.mcp.tools.definitions import TOOL_DEFINITIONS, TOOL_NAMES


class FakeRunner:
    """Runner double recording every call."""

    def __init__(self, output="fake output", error=None):
        self.output = output
        self.error = error
        self.calls = []
        self.shutdown_calls = 0

    async def run(self, args, input_text=None):
        self.calls.append((list(args), input_text))
        if self.error is not None:
            raise self.error
        return self.output

    async def probe_version(self):
        return "9.9.9 (Claude Code)"

    def shutdown(self):
        self.shutdown_calls += 1


@pytest.fixture
def config(tmp_path):
    return ServerConfig(
        claude_bin=Path("/usr/local/bin/claude"),
        timeout=42,
        max_input_length=100,
        run_dir=tmp_path / "run",
    )


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def mcp_server(config, fake_runner):
    return MCPServer(config=config, runner=fake_runner)


def test_server_builds_collaborators_from_config(config):
    """Test that runner and dispatcher are created from the config."""
    server = MCPServer(config=config)

    assert isinstance(server.runner, ProcessRunner)
    assert server.runner.executable == Path("/usr/local/bin/claude")
    assert server.runner.timeout == 42
    assert isinstance(server.dispatcher, ToolDispatcher)
    assert server.dispatcher.max_input_length == 100
    assert server.app is not None


def test_server_uses_injected_runner(mcp_server, fake_runner):
    assert mcp_server.dispatcher.runner is fake_runner


def test_shutdown_kills_in_flight_commands(mcp_server, fake_runner):
    mcp_server.shutdown()
    mcp_server.shutdown()

    assert fake_runner.shutdown_calls == 2


def test_check_cli_returns_version(mcp_server):
    assert mcp_server.check_cli() == "9.9.9 (Claude Code)"


def test_check_cli_failure_is_not_fatal(config):
    server = MCPServer(config=config, runner=ProcessRunner(Path("/nonexistent/claude")))

    assert server.check_cli() is None


def test_start_runs_app_and_shuts_down(mcp_server, fake_runner):
    with patch.object(mcp_server.app, "run") as mock_run:
        mcp_server.start()

    mock_run.assert_called_once_with()
    assert fake_runner.shutdown_calls == 1


def test_start_wraps_failures(mcp_server):
    with patch.object(mcp_server.app, "run", side_effect=OSError("stdio closed")):
        with pytest.raises(RuntimeError, match="Failed to start MCP server"):
            mcp_server.start()


class TestProtocolSurface:
    """Exercise the server through an in-memory FastMCP client."""

    @pytest.mark.asyncio
    async def test_list_tools(self, mcp_server):
        async with Client(mcp_server.app) as client:
            tools = await client.list_tools()

        assert sorted(t.name for t in tools) == sorted(TOOL_NAMES)

    @pytest.mark.asyncio
    async def test_tool_schemas_match_definitions(self, mcp_server):
        async with Client(mcp_server.app) as client:
            tools = {t.name: t for t in await client.list_tools()}

        for definition in TOOL_DEFINITIONS:
            schema = tools[definition.name].inputSchema
            assert set(schema["properties"]) == {p.name for p in definition.parameters}
            assert sorted(schema.get("required", [])) == sorted(definition.required)
            assert tools[definition.name].description == definition.description

            for parameter in definition.parameters:
                advertised = schema["properties"][parameter.name]
                assert advertised["description"] == parameter.description
                assert advertised["type"] == parameter.type
                if parameter.required:
                    assert "default" not in advertised
                else:
                    assert advertised["default"] == parameter.default

    @pytest.mark.asyncio
    async def test_call_tool_returns_text(self, mcp_server, fake_runner):
        async with Client(mcp_server.app) as client:
            result = await client.call_tool(
                "review_code", {"code": "x = 1", "focus_areas": "naming"}
            )

        assert result.content[0].type == "text"
        assert result.content[0].text == "fake output"
        args, prompt = fake_runner.calls[0]
        assert args == ["--print"]
        assert prompt.endswith("Focus on: naming")

    @pytest.mark.asyncio
    async def test_call_tool_failure_is_internal_error(self, mcp_server, fake_runner):
        fake_runner.error = ProcessExitError(1, "rate limited")

        async with Client(mcp_server.app) as client:
            with pytest.raises(ToolError) as exc_info:
                await client.call_tool("your_own_query", {"query": "hi"})

        assert "[500]" in str(exc_info.value)
        assert "rate limited" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_empty_required_argument_is_internal_error(self, mcp_server, fake_runner):
        async with Client(mcp_server.app) as client:
            with pytest.raises(ToolError) as exc_info:
                await client.call_tool("explain_code", {"code": ""})

        assert "[500]" in str(exc_info.value)
        assert "code" in str(exc_info.value)
        assert fake_runner.calls == []

    @pytest.mark.asyncio
    async def test_unknown_tool_never_spawns(self, mcp_server, fake_runner):
        async with Client(mcp_server.app) as client:
            with pytest.raises((ToolError, McpError)) as exc_info:
                await client.call_tool("delete_everything", {"code": "x"})

        assert "unknown tool" in str(exc_info.value).lower()
        assert "delete_everything" in str(exc_info.value)
        assert fake_runner.calls == []


class TestEndToEnd:
    """Full stack against a fake claude executable."""

    @pytest.mark.asyncio
    async def test_real_process(self, echo_claude, tmp_path):
        config = ServerConfig(claude_bin=echo_claude, timeout=10, run_dir=tmp_path / "run")
        server = MCPServer(config=config)

        async with Client(server.app) as client:
            result = await client.call_tool(
                "simulate_command", {"command": "ls", "input": "none"}
            )

        text = result.content[0].text
        assert text.startswith('ARGS=["--print"]\n')
        assert 'User wants to run this command: "ls" with input: "none".' in text
