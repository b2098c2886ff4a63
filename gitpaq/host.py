"""Interface to the environment that embeds the package manager.

Package operations never talk to the user or the surrounding application
directly. They go through a `Host`, which displays notifications, runs host
commands used by `:`-prefixed hooks, makes package content available and
receives the signals sent when a batch finishes.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
import logging
import shlex
import sys
from typing import TYPE_CHECKING, TextIO

from .exceptions import HookException

if TYPE_CHECKING:
    from .package import Package

__all__ = [
    "Host",
    "ConsoleHost",
]

_LOGGER = logging.getLogger(__name__)

HOST_COMMAND_SIGIL = ":"


class Host(ABC):
    """Collaborator interface consumed by package operations."""

    @abstractmethod
    def notify(self, message: str, level: int = logging.INFO) -> None:
        """Display a message to the user with a logging severity level."""

    @abstractmethod
    def execute(self, command: str) -> None:
        """Run a host command, raising an exception if it fails."""

    @abstractmethod
    def load(self, package: "Package") -> None:
        """Make the content of an installed package available."""

    @abstractmethod
    def reload(self) -> None:
        """Reload fetched content and regenerate derived indexes."""

    @abstractmethod
    def broadcast_done(self, operation: str) -> None:
        """Signal that a batch of the given operation has finished."""


HostCommand = Callable[[list[str]], None]
DoneListener = Callable[[str], None]


class ConsoleHost(Host):
    """Host for the command line tool.

    Notifications are printed, host commands are looked up in a table of
    registered Python callables and listeners can subscribe to the batch
    completion signal.
    """

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None) -> None:
        """Initialize ConsoleHost."""
        self._out = out
        self._err = err
        self._commands: dict[str, HostCommand] = {}
        self._done_listeners: list[DoneListener] = []
        self._loaded: list[str] = []

    @property
    def loaded(self) -> list[str]:
        """Names of packages loaded during this session."""
        return list(self._loaded)

    def register_command(self, name: str, command: HostCommand) -> None:
        """Register a command that `:name args...` hooks can run."""
        self._commands[name] = command

    def add_done_listener(self, listener: DoneListener) -> Callable[[], None]:
        """Subscribe to batch completion, returns a callable to unsubscribe."""
        self._done_listeners.append(listener)

        def _remove() -> None:
            self._done_listeners.remove(listener)

        return _remove

    def notify(self, message: str, level: int = logging.INFO) -> None:
        if level >= logging.ERROR:
            print(f"gitpaq: {message}", file=self._err or sys.stderr)
        else:
            print(f"gitpaq: {message}", file=self._out or sys.stdout)

    def execute(self, command: str) -> None:
        args = shlex.split(command.removeprefix(HOST_COMMAND_SIGIL))
        if not args:
            raise HookException(f"Empty host command '{command}'")
        name, *rest = args
        if (handler := self._commands.get(name)) is None:
            raise HookException(f"Unknown host command '{name}'")
        _LOGGER.debug("Running host command: %s", command)
        handler(rest)

    def load(self, package: "Package") -> None:
        _LOGGER.debug("Loading package %s from %s", package.name, package.dir)
        if package.name not in self._loaded:
            self._loaded.append(package.name)

    def reload(self) -> None:
        _LOGGER.debug("Reloading installed packages")

    def broadcast_done(self, operation: str) -> None:
        _LOGGER.debug("Batch %s done", operation)
        for listener in list(self._done_listeners):
            listener(operation)
