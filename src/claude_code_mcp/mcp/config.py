"""
Server configuration and PID file management.

Configuration is read once at startup from an optional YAML file and the
environment (environment wins), validated, and frozen. Components receive
the resulting ServerConfig explicitly; nothing below the CLI reads the
environment for settings.
"""

import logging
import os
import signal
import time
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigurationError
from .prompts import DEFAULT_MAX_INPUT_LENGTH
from .runner import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

DEFAULT_RUN_DIR = Path.home() / ".claude-code-mcp" / "run"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Environment variable -> config field
ENV_VARS = {
    "CLAUDE_BIN": "claude_bin",
    "MCP_TOOL_TIMEOUT": "timeout",
    "MCP_MAX_INPUT_LENGTH": "max_input_length",
    "MCP_LOG_LEVEL": "log_level",
    "MCP_RUN_DIR": "run_dir",
}


def _to_float(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid {name}: {value!r}. Must be a number.")
    if number <= 0:
        raise ConfigurationError(f"Invalid {name}: {value!r}. Must be positive.")
    return number


def _to_int(name: str, value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid {name}: {value!r}. Must be an integer.")
    if number <= 0:
        raise ConfigurationError(f"Invalid {name}: {value!r}. Must be positive.")
    return number


@dataclass(frozen=True)
class ServerConfig:
    """
    Immutable server configuration.

    Attributes:
        claude_bin: Absolute path to the Claude CLI executable (required)
        timeout: Seconds before a running command is killed (default: 300)
        max_input_length: Per-argument truncation threshold (default: 10000)
        log_level: Logging level name (default: "INFO")
        run_dir: Directory holding one PID file per running server
            (default: ~/.claude-code-mcp/run)
    """

    claude_bin: Optional[Path] = None
    timeout: float = DEFAULT_TIMEOUT
    max_input_length: int = DEFAULT_MAX_INPUT_LENGTH
    log_level: str = "INFO"
    run_dir: Path = field(default=DEFAULT_RUN_DIR)

    def __post_init__(self):
        """Normalize and validate values."""
        if self.claude_bin is None or str(self.claude_bin).strip() == "":
            raise ConfigurationError(
                "CLAUDE_BIN is not set. "
                "Set it to the absolute path of the claude executable."
            )
        claude_bin = Path(self.claude_bin).expanduser()
        if not claude_bin.is_absolute():
            raise ConfigurationError(
                f"CLAUDE_BIN must be an absolute path: {self.claude_bin}"
            )
        object.__setattr__(self, "claude_bin", claude_bin)
        object.__setattr__(self, "timeout", _to_float("timeout", self.timeout))
        object.__setattr__(
            self, "max_input_length", _to_int("max_input_length", self.max_input_length)
        )

        log_level = str(self.log_level).upper()
        if log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level '{self.log_level}'. "
                f"Must be one of: {', '.join(LOG_LEVELS)}."
            )
        object.__setattr__(self, "log_level", log_level)
        object.__setattr__(self, "run_dir", Path(self.run_dir).expanduser())

    @classmethod
    def load(
        cls,
        config_file: Optional[Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ServerConfig":
        """
        Load configuration from an optional YAML file and the environment.

        Precedence (highest first): overrides, environment variables,
        config file, defaults.

        Args:
            config_file: Optional path to a YAML config file
            overrides: Values that win over everything else (CLI options);
                None values are ignored

        Returns:
            Validated ServerConfig

        Raises:
            ConfigurationError: If the file is invalid or required values
                are missing
        """
        config_dict: Dict[str, Any] = {}

        if config_file is not None:
            config_file = Path(config_file)
            if not config_file.exists():
                raise ConfigurationError(f"Config file not found: {config_file}")
            try:
                with open(config_file) as f:
                    loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid config file {config_file}: {e}") from e
            if not isinstance(loaded, dict):
                raise ConfigurationError(
                    f"Invalid config file {config_file}: expected a mapping"
                )
            config_dict.update(loaded)

        for env_var, key in ENV_VARS.items():
            if env_var in os.environ:
                config_dict[key] = os.environ[env_var]

        for key, value in (overrides or {}).items():
            if value is not None:
                config_dict[key] = value

        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config_dict.items() if k in known})


class ServerRegistry:
    """
    Tracks running stdio servers through one PID file each.

    MCP clients spawn a separate server per session, so any number may run
    at once. Each server registers ``<run_dir>/<pid>.pid`` on startup and
    removes it on exit; ``status`` and ``stop`` work from the directory
    listing.
    """

    SUFFIX = ".pid"

    def __init__(self, run_dir: Path, pid: Optional[int] = None):
        self.run_dir = Path(run_dir)
        self.pid = pid if pid is not None else os.getpid()

    @property
    def pid_file(self) -> Path:
        """PID file of the server this registry was created for."""
        return self.run_dir / f"{self.pid}{self.SUFFIX}"

    def register(self) -> None:
        """Record this server, creating the run directory if needed."""
        self.run_dir.mkdir(parents=True, exist_ok=True)
        self.pid_file.write_text(str(self.pid))

    def unregister(self) -> None:
        """Remove this server's PID file. Safe to call more than once."""
        self.pid_file.unlink(missing_ok=True)

    def servers(self) -> List[int]:
        """
        Return the PIDs of live registered servers in ascending order.

        PID files that are unreadable or name a dead process are removed.
        """
        if not self.run_dir.is_dir():
            return []

        live = []
        for entry in self.run_dir.glob(f"*{self.SUFFIX}"):
            pid = self._read(entry)
            if pid is not None and self._is_process_running(pid):
                live.append(pid)
            else:
                logger.debug("Removing stale PID file %s", entry)
                entry.unlink(missing_ok=True)
        return sorted(live)

    def stop(self, pid: Optional[int] = None, timeout: int = 10) -> List[int]:
        """
        Send SIGTERM to registered servers and wait for them to exit.

        Args:
            pid: Stop only this server; all registered servers when None
            timeout: Seconds to wait for graceful shutdown

        Returns:
            PIDs still running when the timeout expired (empty on success)

        Raises:
            RuntimeError: If no matching server is running or a signal
                cannot be delivered
        """
        running = self.servers()
        if pid is not None:
            if pid not in running:
                raise RuntimeError(f"No MCP server running with PID {pid}.")
            running = [pid]
        if not running:
            raise RuntimeError(f"No MCP server running. No PID files in {self.run_dir}.")

        for target in running:
            try:
                os.kill(target, signal.SIGTERM)
            except ProcessLookupError:
                # Exited since the listing
                continue
            except PermissionError:
                raise RuntimeError(
                    f"Permission denied: Cannot stop server (PID: {target}). "
                    "It may be owned by another user."
                )

        deadline = time.monotonic() + timeout
        remaining = list(running)
        while remaining:
            remaining = [p for p in remaining if self._is_process_running(p)]
            if not remaining or time.monotonic() >= deadline:
                break
            time.sleep(0.1)

        for stopped in set(running) - set(remaining):
            ServerRegistry(self.run_dir, stopped).unregister()
        return remaining

    def get_status(self) -> Dict[str, Any]:
        """
        Get status of all registered servers.

        Returns:
            Dictionary with keys running, pids and run_dir
        """
        pids = self.servers()
        return {"running": bool(pids), "pids": pids, "run_dir": str(self.run_dir)}

    @staticmethod
    def _read(pid_file: Path) -> Optional[int]:
        try:
            return int(pid_file.read_text().strip())
        except (ValueError, OSError):
            return None

    @staticmethod
    def _is_process_running(pid: int) -> bool:
        try:
            # Signal 0 only checks existence
            os.kill(pid, 0)
            return True
        except ProcessLookupError:
            return False
        except PermissionError:
            # Exists but owned by another user
            return True
        except OSError:
            return False


def default_run_dir() -> Path:
    """Run directory for commands that don't need a full config."""
    return Path(os.environ.get("MCP_RUN_DIR", str(DEFAULT_RUN_DIR))).expanduser()
