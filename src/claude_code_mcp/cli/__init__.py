"""Command-line interface for claude-code-mcp."""

import typer

from claude_code_mcp import __version__

from .commands import server

app = typer.Typer(
    name="claude-code-mcp",
    help="MCP server that forwards code tasks to the Claude CLI",
    no_args_is_help=True,
)
app.add_typer(server.app, name="server")


def _version_callback(value: bool):
    if value:
        typer.echo(f"claude-code-mcp {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """Claude Code MCP server."""


def main():
    app()
