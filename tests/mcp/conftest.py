"""Shared fixtures for MCP server tests."""

import stat
import sys
import textwrap
from pathlib import Path

import pytest


@pytest.fixture
def make_script(tmp_path):
    """Write an executable Python script and return its path.

    Used as a stand-in for the claude executable.
    """
    def _make(body: str, name: str = "fake-claude") -> Path:
        script = tmp_path / name
        script.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script
    return _make


@pytest.fixture
def echo_claude(make_script):
    """Fake claude that echoes its arguments and stdin."""
    return make_script(
        """
        import json
        import sys

        data = sys.stdin.read()
        sys.stdout.write("ARGS=" + json.dumps(sys.argv[1:]) + "\\n")
        sys.stdout.write(data)
        sys.stdout.write("\\n\\n")
        """
    )
