"""Git invocations used to fetch and update packages."""

import logging

import aiofiles

from .command import Command, ProcessRunner
from .package import Package

__all__ = [
    "GitOperations",
]

_LOGGER = logging.getLogger(__name__)

GIT = "git"
CHANGELOG_FORMAT = "--pretty=format:* %s"


class GitOperations:
    """Builds and runs the git commands for a package."""

    def __init__(self, runner: ProcessRunner) -> None:
        """Initialize GitOperations."""
        self._runner = runner

    @staticmethod
    def clone_command(pkg: Package) -> Command:
        """Return the shallow clone command for the package."""
        args = [
            GIT,
            "clone",
            str(pkg.url),
            "--depth=1",
            "--recurse-submodules",
            "--shallow-submodules",
        ]
        if pkg.branch:
            args.extend(["-b", pkg.branch])
        args.append(str(pkg.dir))
        return Command(args)

    @staticmethod
    def pull_command(pkg: Package) -> Command:
        """Return the pull command, run from the package directory."""
        return Command(
            [GIT, "pull", "--recurse-submodules", "--update-shallow"], cwd=pkg.dir
        )

    @staticmethod
    def log_command(pkg: Package, prev_hash: str, cur_hash: str) -> Command:
        """Return the command listing commit subjects between two revisions."""
        return Command(
            [GIT, "log", CHANGELOG_FORMAT, f"{prev_hash}..{cur_hash}"], cwd=pkg.dir
        )

    async def clone(self, pkg: Package) -> bool:
        """Clone the package into its directory."""
        if pkg.dir is not None:
            pkg.dir.parent.mkdir(parents=True, exist_ok=True)
        return await self._runner.run(self.clone_command(pkg))

    async def pull(self, pkg: Package) -> bool:
        """Pull new commits into the package directory."""
        return await self._runner.run(self.pull_command(pkg))

    async def log_changes(self, pkg: Package, prev_hash: str, cur_hash: str) -> None:
        """Append the subjects of the commits a pull brought in to the log file."""
        success, output = await self._runner.capture(
            self.log_command(pkg, prev_hash, cur_hash)
        )
        if not success:
            _LOGGER.debug("Unable to list changes for %s", pkg.name)
            return
        async with aiofiles.open(self._runner.log_path, mode="a") as log:
            await log.write(f"\n\n{pkg.name} updated:\n{output}")
