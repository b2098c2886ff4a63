"""Aggregation of the outcomes of one batch of package operations.

A batch dispatches one independent pipeline per package. Pipelines finish in
any order and each reports exactly one `Outcome` into the batch's
`OperationCounter`. The counter reports progress as results arrive and runs
its finalization callbacks exactly once, when the last expected result is
accepted.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
import logging

from .exceptions import CounterException
from .host import Host

__all__ = [
    "Outcome",
    "Operation",
    "Summary",
    "OperationCounter",
    "report",
]

_LOGGER = logging.getLogger(__name__)


class Outcome(StrEnum):
    """Terminal result of one package pipeline."""

    OK = "ok"
    ERR = "err"
    NOP = "nop"


class Operation(StrEnum):
    """Kind of operation a batch or a single result is reported under."""

    INSTALL = "install"
    UPDATE = "update"
    REMOVE = "remove"
    SYNC = "sync"
    HOOK = "hook"


MESSAGES: dict[Operation, dict[Outcome, str]] = {
    Operation.INSTALL: {Outcome.OK: "Installed", Outcome.ERR: "Failed to install"},
    Operation.UPDATE: {
        Outcome.OK: "Updated",
        Outcome.ERR: "Failed to update",
        Outcome.NOP: "(up-to-date)",
    },
    Operation.REMOVE: {Outcome.OK: "Removed", Outcome.ERR: "Failed to remove"},
    Operation.HOOK: {Outcome.OK: "Ran hook for", Outcome.ERR: "Failed to run hook for"},
}


def report(
    host: Host,
    operation: Operation,
    name: str,
    outcome: Outcome,
    progress: tuple[int, int] | None = None,
) -> None:
    """Send a per-package progress notification to the host."""
    count = f"[{progress[0]}/{progress[1]}] " if progress else ""
    message = MESSAGES.get(operation, {}).get(outcome, str(outcome))
    level = logging.ERROR if outcome == Outcome.ERR else logging.INFO
    host.notify(f"{count}{message} {name}", level)


@dataclass
class Summary:
    """Outcome counts for a finished batch."""

    operation: Operation
    total: int = 0
    ok: int = 0
    err: int = 0
    nop: int = 0

    @property
    def done(self) -> int:
        """Number of results accepted so far."""
        return self.ok + self.err + self.nop

    def __str__(self) -> str:
        text = f"{self.operation} complete. {self.ok} ok; {self.err} errors;"
        if self.nop > 0:
            text += f" {self.nop} no-ops"
        return text


Finalizer = Callable[[Summary], None]


class OperationCounter:
    """Tallies the results of a batch and finalizes it exactly once."""

    def __init__(
        self,
        host: Host,
        operation: Operation,
        total: int,
        verbose: bool = False,
        finalizers: list[Finalizer] | None = None,
    ) -> None:
        """Initialize OperationCounter."""
        if total <= 0:
            raise CounterException(f"A {operation} batch needs at least one package")
        self._host = host
        self._verbose = verbose
        self._finalizers = list(finalizers or [])
        self._summary = Summary(operation=operation, total=total)

    @property
    def summary(self) -> Summary:
        """Counts accepted so far."""
        return self._summary

    @property
    def complete(self) -> bool:
        """True once every expected result has been accepted."""
        return self._summary.done >= self._summary.total

    def accept(
        self, name: str, outcome: Outcome, operation: Operation | None = None
    ) -> None:
        """Record the result of one package.

        `operation` overrides the batch operation in the progress message, for
        batches such as sync that mix installs and updates.
        """
        summary = self._summary
        if self.complete:
            raise CounterException(
                f"Unexpected result {outcome} for {name}: {summary.operation} "
                f"batch already received {summary.total} results"
            )
        match outcome:
            case Outcome.OK:
                summary.ok += 1
            case Outcome.ERR:
                summary.err += 1
            case Outcome.NOP:
                summary.nop += 1
        _LOGGER.debug(
            "%s %s: %s (%d/%d)",
            summary.operation,
            name,
            outcome,
            summary.done,
            summary.total,
        )
        if outcome != Outcome.NOP or self._verbose:
            report(
                self._host,
                operation or summary.operation,
                name,
                outcome,
                (summary.ok + summary.nop, summary.total),
            )
        if self.complete:
            self._finalize()

    def _finalize(self) -> None:
        summary = self._summary
        self._host.notify(str(summary), logging.INFO)
        self._host.reload()
        self._host.broadcast_done(summary.operation)
        for finalizer in self._finalizers:
            finalizer(summary)
