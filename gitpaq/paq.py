"""Orchestration of package operations.

`Paq` is the entry point of the library. It owns the package registry and the
lock file, and it runs each public operation as a batch: the packages the
operation applies to are selected, one pipeline per package is dispatched as
a task and every pipeline reports its outcome to the batch's
`OperationCounter`.

Example usage:

```python
from gitpaq import Paq

paq = Paq().declare(["owner/repo", {"source": "owner/other", "pin": True}])
summary = await paq.sync()
print(summary)
```
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from functools import partial
import logging
from operator import attrgetter
from pathlib import Path
from time import perf_counter
from typing import Any

from .command import ProcessRunner
from .config import Config
from .counter import Operation, OperationCounter, Outcome, Summary
from .exceptions import InputException
from .git_ops import GitOperations
from .hook import HookRunner
from .host import ConsoleHost, Host
from .inspector import RefFileInspector, RepositoryInspector
from .lock import LockStore
from .package import (
    Package,
    PackageSpec,
    Status,
    installed,
    not_removed,
    removed,
    to_install,
    to_update,
)
from .registry import PackageRegistry
from .scanner import DirectoryScanner, Unlisted, remove_tree
from .task import TaskService, get_task_service

__all__ = [
    "Paq",
]

_LOGGER = logging.getLogger(__name__)

MARKERS = {Status.CLONED: "+", Status.UPDATED: "*"}


@dataclass
class _Job:
    """One package pipeline of a batch."""

    name: str
    run: Callable[[], Awaitable[Outcome]]
    operation: Operation | None = None


class Paq:
    """Installs, updates and removes declared packages."""

    def __init__(
        self,
        config: Config | None = None,
        host: Host | None = None,
        inspector: RepositoryInspector | None = None,
        task_service: TaskService | None = None,
    ) -> None:
        """Initialize Paq."""
        self.config = config or Config()
        self.host = host or ConsoleHost()
        self._inspector = inspector or RefFileInspector()
        self._tasks = task_service or get_task_service()
        self.registry = PackageRegistry(self.config, self.host, self._inspector)
        self.lock = LockStore(self.config.lock_path, self.registry)
        self._runner = ProcessRunner(self.config.log_path, self.config.jobs)
        self._git = GitOperations(self._runner)
        self._hooks = HookRunner(self._runner, self.host)
        self._scanner = DirectoryScanner(self.config)

    @property
    def log_path(self) -> Path:
        """Location of the shared log file."""
        return self.config.log_path

    def declare(self, specs: "Iterable[str | dict[str, Any] | PackageSpec]") -> "Paq":
        """Rebuild the registry from declarations and load the lock file."""
        self.registry.clear()
        for spec in specs:
            self.registry.register(spec)
        self.lock.load()
        return self

    async def install(self) -> Summary:
        """Clone every package that is not on disk yet."""
        return await self._execute(
            Operation.INSTALL,
            [
                _Job(pkg.name, partial(self._clone, pkg))
                for pkg in self.registry.filter(to_install)
            ],
        )

    async def update(self) -> Summary:
        """Pull every installed package that is not pinned."""
        return await self._execute(
            Operation.UPDATE,
            [
                _Job(pkg.name, partial(self._pull, pkg))
                for pkg in self.registry.filter(to_update)
            ],
        )

    async def clean(self) -> Summary:
        """Remove directories under the install root that no package owns."""
        return await self._execute(
            Operation.REMOVE,
            [
                _Job(item.name, partial(self._remove, item))
                for item in self._scanner.find_unlisted(self.registry)
            ],
        )

    async def sync(self, clean: bool = True) -> Summary:
        """Clean, then install missing packages and update installed ones.

        Pass `clean=False` when the caller runs `clean` itself and needs its
        summary.
        """
        if clean:
            await self.clean()
        jobs: list[_Job] = []
        for pkg in self.registry.filter(not_removed):
            if to_update(pkg):
                jobs.append(_Job(pkg.name, partial(self._pull, pkg), Operation.UPDATE))
            elif to_install(pkg):
                jobs.append(
                    _Job(pkg.name, partial(self._clone, pkg), Operation.INSTALL)
                )
        return await self._execute(Operation.SYNC, jobs)

    def list_packages(self) -> tuple[list[Package], list[Package]]:
        """Return installed and recently removed packages from the lock file."""
        snapshot = list(self.lock.snapshot.values())
        return (
            sorted(filter(installed, snapshot), key=attrgetter("name")),
            sorted(filter(removed, snapshot), key=attrgetter("name")),
        )

    @staticmethod
    def marker(pkg: Package) -> str:
        """Return the marker shown next to recently cloned or updated packages."""
        return MARKERS.get(pkg.status, " ")

    async def run_hook(self, name: str) -> Outcome:
        """Run the hook of a single package outside of any batch."""
        if (pkg := self.registry.get(name)) is None:
            raise InputException(f"Unknown package '{name}'")
        if pkg.hook is None:
            raise InputException(f"Package '{name}' has no hook")
        return await self._hooks.run(pkg)

    def log_clean(self) -> None:
        """Delete the log file."""
        try:
            self.config.log_path.unlink()
        except FileNotFoundError as err:
            raise InputException(f"No log file at {self.config.log_path}") from err
        self.host.notify("log file deleted", logging.INFO)

    async def drain(self) -> None:
        """Wait for background work such as changelog capture to finish."""
        await self._tasks.block_till_done(background=True)

    async def _execute(self, operation: Operation, jobs: list[_Job]) -> Summary:
        """Run one batch, returning once every pipeline has reported."""
        if not jobs:
            self.host.notify(f"Nothing to {operation}", logging.INFO)
            self.host.broadcast_done(operation)
            return Summary(operation=operation)
        counter = OperationCounter(
            self.host, operation, len(jobs), verbose=self.config.verbose
        )
        _LOGGER.debug("Starting %s of %d packages", operation, len(jobs))
        t1 = perf_counter()
        for job in jobs:
            self._tasks.create_task(
                self._run_job(counter, job), name=f"{operation} {job.name}"
            )
        await self._tasks.block_till_done()
        _LOGGER.debug("Finished %s in %0.2fs", operation, perf_counter() - t1)
        return counter.summary

    async def _run_job(self, counter: OperationCounter, job: _Job) -> None:
        try:
            outcome = await job.run()
        except Exception as err:  # pylint: disable=broad-except
            _LOGGER.error(
                "Failed to %s %s: %s",
                job.operation or counter.summary.operation,
                job.name,
                err,
            )
            outcome = Outcome.ERR
        counter.accept(job.name, outcome, job.operation)

    async def _after_change(self, pkg: Package) -> Outcome:
        if pkg.hook is None:
            return Outcome.OK
        return await self._hooks.run(pkg)

    async def _clone(self, pkg: Package) -> Outcome:
        if not await self._git.clone(pkg):
            return Outcome.ERR
        pkg.status = Status.CLONED
        if pkg.dir is not None:
            pkg.hash = self._inspector.get_hash(pkg.dir)
        self.lock.write()
        return await self._after_change(pkg)

    async def _pull(self, pkg: Package) -> Outcome:
        locked = self.lock.get(pkg.name)
        prev_hash = (locked.hash if locked else None) or pkg.hash
        if not await self._git.pull(pkg):
            return Outcome.ERR
        cur_hash = self._inspector.get_hash(pkg.dir) if pkg.dir else None
        if cur_hash == prev_hash:
            return Outcome.NOP
        if prev_hash and cur_hash:
            self._tasks.create_background_task(
                self._git.log_changes(pkg, prev_hash, cur_hash),
                name=f"changelog {pkg.name}",
            )
        pkg.hash = cur_hash
        pkg.status = Status.UPDATED
        self.lock.write()
        return await self._after_change(pkg)

    async def _remove(self, item: Unlisted) -> Outcome:
        if not await asyncio.to_thread(remove_tree, item.dir):
            return Outcome.ERR
        # A live package of the same name installed elsewhere keeps its record
        live = self.registry.get(item.name)
        if live is None or live.dir is None or removed(live):
            self.registry.tombstone(item.name)
        self.lock.write()
        return Outcome.OK
