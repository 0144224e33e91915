"""MCP server management commands."""

import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from claude_code_mcp.mcp.config import ServerConfig, ServerRegistry, default_run_dir
from claude_code_mcp.mcp.runner import ProcessRunner
from claude_code_mcp.mcp.server import MCPServer
from claude_code_mcp.mcp.tools import TOOL_DEFINITIONS

app = typer.Typer(help="MCP server management")

# stdout carries the MCP protocol; everything human-readable goes to stderr
console = Console(stderr=True, soft_wrap=True)


def _configure_logging(level: str) -> None:
    """Send all log records to stderr through Rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _setup_signal_handlers(registry: ServerRegistry, server: MCPServer):
    """
    Setup signal handlers for graceful shutdown.

    Handles SIGTERM and SIGINT (Ctrl+C): kills in-flight commands, removes
    the PID file and exits cleanly.
    """
    def signal_handler(signum, frame):
        console.print("\n[yellow]Shutting down MCP server...[/yellow]")
        server.shutdown()
        registry.unregister()
        console.print("[green]Server stopped successfully[/green]")
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


@app.command()
def start(
    config_file: Optional[Path] = typer.Option(
        None, "--config", help="YAML config file (environment variables override it)"
    ),
    claude_bin: Optional[Path] = typer.Option(
        None, help="Absolute path to the claude executable (overrides CLAUDE_BIN)"
    ),
    timeout: Optional[float] = typer.Option(
        None, help="Seconds before a running command is killed"
    ),
    max_input_length: Optional[int] = typer.Option(
        None, help="Arguments longer than this are truncated"
    ),
    log_level: Optional[str] = typer.Option(None, help="Log level (DEBUG, INFO, ...)"),
):
    """
    Start the MCP server on stdio.

    Precedence: command-line options, then environment variables, then
    the config file.

    Examples:
        # Start with CLAUDE_BIN from the environment
        claude-code-mcp server start

        # Explicit executable and a shorter timeout
        claude-code-mcp server start --claude-bin /usr/local/bin/claude --timeout 120
    """
    try:
        config = ServerConfig.load(
            config_file,
            overrides={
                "claude_bin": claude_bin,
                "timeout": timeout,
                "max_input_length": max_input_length,
                "log_level": log_level,
            },
        )
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    _configure_logging(config.log_level)
    registry = ServerRegistry(config.run_dir)
    try:
        registry.register()
    except OSError as e:
        console.print(f"[red]Cannot write PID file:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    try:
        server = MCPServer(config=config)
        _setup_signal_handlers(registry, server)

        console.print("[green]Starting MCP server...[/green]")
        console.print(f"Claude CLI: {config.claude_bin}")
        console.print(f"Timeout: {config.timeout:g}s")
        console.print(f"PID file: {registry.pid_file}")
        server.check_cli()

        server.start()
    except RuntimeError as e:
        console.print(f"[red]Error starting server:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped by user[/yellow]")
        raise typer.Exit(0)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    finally:
        registry.unregister()


@app.command()
def status(
    run_dir: Optional[Path] = typer.Option(None, help="Run directory (overrides MCP_RUN_DIR)"),
):
    """
    Show the MCP servers that are currently running.

    Exits with status 1 when no server is running.
    """
    registry = ServerRegistry(run_dir or default_run_dir())
    status_info = registry.get_status()

    table = Table(title="MCP Server Status", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    if status_info["running"]:
        table.add_row("Status", f"[green]Running[/green] ({len(status_info['pids'])})")
        table.add_row("PIDs", ", ".join(str(pid) for pid in status_info["pids"]))
    else:
        table.add_row("Status", "[red]Not running[/red]")
    table.add_row("Run Dir", status_info["run_dir"])

    console.print(table)

    if not status_info["running"]:
        raise typer.Exit(1)


@app.command()
def stop(
    pid: Optional[int] = typer.Option(None, help="Stop only this server"),
    timeout: int = typer.Option(10, help="Seconds to wait for graceful shutdown"),
    run_dir: Optional[Path] = typer.Option(None, help="Run directory (overrides MCP_RUN_DIR)"),
):
    """
    Stop running MCP servers gracefully.

    Sends SIGTERM to every registered server (or only --pid) and waits for
    them to exit cleanly.
    """
    registry = ServerRegistry(run_dir or default_run_dir())

    try:
        console.print("[yellow]Stopping MCP server...[/yellow]")
        remaining = registry.stop(pid=pid, timeout=timeout)
    except RuntimeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    if remaining:
        console.print(
            f"[red]Server (PID: {', '.join(map(str, remaining))}) did not stop "
            f"within {timeout} seconds.[/red]\n"
            "[yellow]Consider increasing timeout or manually killing the process.[/yellow]"
        )
        raise typer.Exit(1)

    console.print("[green]Server stopped successfully[/green]")


@app.command()
def tools():
    """List the tools the server exposes."""
    table = Table(title="Claude Code Tools")
    table.add_column("Tool", style="cyan", no_wrap=True, min_width=16)
    table.add_column("Required")
    table.add_column("Optional")
    table.add_column("Description")

    for definition in TOOL_DEFINITIONS:
        table.add_row(
            definition.name,
            ", ".join(definition.required),
            ", ".join(definition.optional) or "-",
            definition.description,
        )

    console.print(table)


@app.command()
def check(
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML config file"),
    claude_bin: Optional[Path] = typer.Option(None, help="Path to the claude executable"),
):
    """Verify that the configured Claude CLI can be executed."""
    try:
        config = ServerConfig.load(config_file, overrides={"claude_bin": claude_bin})
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    runner = ProcessRunner(executable=config.claude_bin, timeout=config.timeout)
    try:
        version = asyncio.run(runner.probe_version())
    except Exception as e:
        console.print(
            f"[red]Claude CLI ({config.claude_bin}) cannot be executed:[/red] "
            f"{escape(str(e))}"
        )
        raise typer.Exit(1)

    console.print(f"[green]Claude CLI found:[/green] {escape(version)}")
