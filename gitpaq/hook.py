"""Post-operation hooks run after a package is cloned or updated.

A hook is declared as a Python callable, a shell command line or a host
command starting with `:`. The variant is decided once when the package is
declared and each variant has its own way of running.
"""

from collections.abc import Callable
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any

from .command import Command, ProcessRunner
from .counter import Operation, Outcome, report
from .exceptions import InputException
from .host import HOST_COMMAND_SIGIL, Host

if TYPE_CHECKING:
    from .package import Package

__all__ = [
    "Hook",
    "CallableHook",
    "ShellHook",
    "HostCommandHook",
    "parse_hook",
    "HookRunner",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallableHook:
    """A Python callable run in-process once the package is loaded."""

    func: Callable[[], Any]

    def __str__(self) -> str:
        return getattr(self.func, "__qualname__", repr(self.func))


@dataclass(frozen=True)
class ShellHook:
    """An external command run from the package directory."""

    command: str

    @property
    def args(self) -> list[str]:
        """The command split on whitespace."""
        return self.command.split()

    def __str__(self) -> str:
        return self.command


@dataclass(frozen=True)
class HostCommandHook:
    """A command executed by the host, written with a leading `:`."""

    command: str

    def __str__(self) -> str:
        return self.command


Hook = CallableHook | ShellHook | HostCommandHook


def parse_hook(value: Any) -> Hook:
    """Build the hook variant for a declared value."""
    if isinstance(value, (CallableHook, ShellHook, HostCommandHook)):
        return value
    if isinstance(value, str):
        if not value.strip():
            raise InputException("Hook command must not be empty")
        if value.startswith(HOST_COMMAND_SIGIL):
            return HostCommandHook(value)
        return ShellHook(value)
    if callable(value):
        return CallableHook(value)
    raise InputException(f"Invalid hook, expected a string or callable: {value!r}")


class HookRunner:
    """Runs the hook of a package and reports how it went."""

    def __init__(self, runner: ProcessRunner, host: Host) -> None:
        """Initialize HookRunner."""
        self._runner = runner
        self._host = host

    async def run(self, pkg: "Package") -> Outcome:
        """Run the hook of `pkg`, which must have one."""
        if pkg.hook is None:
            raise ValueError(f"Package {pkg.name} has no hook")
        _LOGGER.debug("Running hook for %s: %s", pkg.name, pkg.hook)
        match pkg.hook:
            case CallableHook(func=func):
                self._host.load(pkg)
                try:
                    func()
                except Exception as err:  # pylint: disable=broad-except
                    _LOGGER.error("Hook for %s raised: %s", pkg.name, err)
                    outcome = Outcome.ERR
                else:
                    outcome = Outcome.OK
            case HostCommandHook(command=command):
                try:
                    self._host.execute(command)
                except Exception as err:  # pylint: disable=broad-except
                    _LOGGER.error("Host command for %s failed: %s", pkg.name, err)
                    outcome = Outcome.ERR
                else:
                    outcome = Outcome.OK
            case ShellHook() as hook:
                name, *args = hook.args
                success = await self._runner.run(Command([name, *args], cwd=pkg.dir))
                outcome = Outcome.OK if success else Outcome.ERR
        report(self._host, Operation.HOOK, pkg.name, outcome)
        return outcome
