"""
Process runner for the external Claude CLI.

Spawns one subprocess per call, feeds it the prompt on stdin, collects
stdout and stderr separately and enforces a wall-clock timeout.

Failure modes:
- Spawn failure (missing binary, permission denied): the OSError from the
  spawn propagates unchanged, before any timeout is armed
- Timeout: the child is killed and ProcessTimeoutError is raised
- Non-zero exit: ProcessExitError carrying the exit code and stderr text
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Set, Tuple

from .errors import ProcessExitError, ProcessTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300.0
PRINT_MODE_FLAG = "--print"
VERSION_FLAG = "--version"


@dataclass(frozen=True)
class ProcessInvocation:
    """One execution of the external command."""

    executable: Path
    args: Tuple[str, ...]
    input_text: Optional[str]
    timeout: float

    @property
    def argv(self) -> Tuple[str, ...]:
        return (str(self.executable),) + self.args


def _decode(data: Optional[bytes]) -> str:
    return (data or b"").decode("utf-8", errors="replace")


class ProcessRunner:
    """
    Runs the configured executable to completion or timeout.

    The executable path and timeout are fixed at construction. Concurrent
    calls each own an independent subprocess; the only shared state is the
    set of in-flight children kept for shutdown().
    """

    def __init__(self, executable: Path, timeout: float = DEFAULT_TIMEOUT):
        self.executable = Path(executable)
        self.timeout = timeout
        self._active: Set[asyncio.subprocess.Process] = set()

    @property
    def active_count(self) -> int:
        return len(self._active)

    async def run(self, args: Sequence[str], input_text: Optional[str] = None) -> str:
        """
        Execute the command and return its trimmed stdout.

        Args:
            args: Arguments passed after the executable
            input_text: Text written to stdin, which is then closed.
                When None, stdin is connected to /dev/null.

        Returns:
            stdout with trailing whitespace removed

        Raises:
            OSError: If the process cannot be spawned
            ProcessTimeoutError: If the process outlives the timeout
            ProcessExitError: If the process exits with a non-zero code
        """
        invocation = ProcessInvocation(
            executable=self.executable,
            args=tuple(args),
            input_text=input_text,
            timeout=self.timeout,
        )
        return await self._execute(invocation)

    async def probe_version(self) -> str:
        """Return the output of ``<executable> --version``."""
        return await self.run([VERSION_FLAG])

    async def _execute(self, invocation: ProcessInvocation) -> str:
        logger.debug("Executing %s", list(invocation.argv))
        if invocation.input_text is not None:
            logger.debug("Input length: %d characters", len(invocation.input_text))

        process = await asyncio.create_subprocess_exec(
            *invocation.argv,
            stdin=(
                asyncio.subprocess.PIPE
                if invocation.input_text is not None
                else asyncio.subprocess.DEVNULL
            ),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=dict(os.environ),
        )
        self._active.add(process)

        stdin_bytes = (
            invocation.input_text.encode("utf-8")
            if invocation.input_text is not None
            else None
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(stdin_bytes), timeout=invocation.timeout
            )
        except asyncio.TimeoutError:
            logger.error(
                "Command timed out after %gs, killing pid %d",
                invocation.timeout,
                process.pid,
            )
            await self._kill(process)
            raise ProcessTimeoutError(invocation.timeout) from None
        finally:
            self._active.discard(process)

        stderr_text = _decode(stderr)
        if stderr_text:
            logger.debug("Claude stderr: %s", stderr_text)

        if process.returncode != 0:
            logger.error("Command failed with code %s", process.returncode)
            raise ProcessExitError(process.returncode, stderr_text)

        return _decode(stdout).rstrip()

    async def _kill(self, process: asyncio.subprocess.Process) -> None:
        try:
            process.kill()
        except ProcessLookupError:
            # Exited between the timeout firing and the kill
            pass
        await process.wait()

    def shutdown(self) -> None:
        """Kill every child that is still running."""
        for process in list(self._active):
            if process.returncode is None:
                logger.info("Killing in-flight command (pid %d)", process.pid)
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
        self._active.clear()
