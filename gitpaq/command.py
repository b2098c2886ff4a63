"""Library for spawning git and hook subprocesses using asyncio.

Every subprocess shares one append-only log file. The log is opened for the
lifetime of a single child and closed as soon as it exits so that many short
lived children never accumulate open descriptors.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
import logging
import os
from pathlib import Path
import shlex
import subprocess

from .exceptions import SpawnException
from .task import get_task_service

_LOGGER = logging.getLogger(__name__)

# No public API
__all__: list[str] = []

DEFAULT_CONCURRENCY = 20

# Fail instead of blocking on a credential prompt nobody will answer
ENV_OVERRIDES = {"GIT_TERMINAL_PROMPT": "0"}


def format_path(path: Path) -> str:
    """Format path for debugging."""
    if path.is_absolute():
        cwd = Path.cwd()
        if path.is_relative_to(cwd):
            rel_path = str(path.relative_to(cwd))
            return f"{rel_path} (abs)"
    return str(path)


@dataclass
class Command:
    """An instance of a command to run."""

    cmd: list[str]
    """Array of command line arguments."""

    cwd: Path | None = None
    """Current working directory."""

    print_stdout: bool = False
    """Send stdout to the log file as well instead of discarding it."""

    @property
    def string(self) -> str:
        """Render the command as a single string."""
        return " ".join([shlex.quote(arg) for arg in self.cmd])

    def __str__(self) -> str:
        """Render as a debug string."""
        cwd: str = ""
        if self.cwd:
            cwd = f"({format_path(self.cwd)}) "
        return f"{cwd}{self.string}"


def process_env() -> dict[str, str]:
    """Return the environment passed to every child process."""
    return {**os.environ, **ENV_OVERRIDES}


class ProcessRunner:
    """Runs subprocesses with their error output appended to a shared log."""

    def __init__(self, log_path: Path, concurrency: int = DEFAULT_CONCURRENCY) -> None:
        """Initialize ProcessRunner."""
        self._log_path = log_path
        self._concurrency = concurrency
        self._sem: asyncio.Semaphore | None = None

    @property
    def log_path(self) -> Path:
        """Location of the shared log file."""
        return self._log_path

    def _semaphore(self) -> asyncio.Semaphore:
        # Created lazily so that it binds to the running loop
        if self._sem is None:
            self._sem = asyncio.Semaphore(self._concurrency)
        return self._sem

    async def run(self, command: Command) -> bool:
        """Run the command to completion and return True if it exited with 0.

        Raises SpawnException if the process could not be started at all.
        """
        async with self._semaphore():
            return await self._run(command)

    async def _run(self, command: Command) -> bool:
        _LOGGER.debug("Running command: %s", command)
        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        with self._log_path.open("ab") as log:
            try:
                proc = await asyncio.create_subprocess_exec(
                    *command.cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=log if command.print_stdout else subprocess.DEVNULL,
                    stderr=log,
                    cwd=command.cwd,
                    env=process_env(),
                )
            except OSError as err:
                _LOGGER.error("Failed to spawn %s: %s", command, err)
                raise SpawnException(command.string, err) from err
            returncode = await proc.wait()
        if returncode:
            _LOGGER.debug(
                "Command '%s' failed with return code %s", command, returncode
            )
        return returncode == 0

    async def capture(self, command: Command) -> tuple[bool, str]:
        """Run the command returning success and its stdout; stderr is discarded."""
        _LOGGER.debug("Capturing command: %s", command)
        async with self._semaphore():
            try:
                proc = await asyncio.create_subprocess_exec(
                    *command.cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.DEVNULL,
                    cwd=command.cwd,
                    env=process_env(),
                )
            except OSError as err:
                _LOGGER.error("Failed to spawn %s: %s", command, err)
                raise SpawnException(command.string, err) from err
            out, _ = await proc.communicate()
        return proc.returncode == 0, out.decode("utf-8", errors="replace")

    def spawn(
        self, command: Command, on_done: Callable[[bool], None]
    ) -> asyncio.Task[None]:
        """Run the command in the background and call `on_done` with the result.

        `on_done` is called exactly once after the process exits. It is never
        called when the process could not be spawned; that failure is logged
        by the task service instead.
        """

        async def _run_and_report() -> None:
            success = await self.run(command)
            on_done(success)

        return get_task_service().create_task(
            _run_and_report(), name=f"spawn {command.string}"
        )
