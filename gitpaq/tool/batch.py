"""Actions that run a batch of package operations."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import cast

from gitpaq.counter import Summary
from gitpaq.exceptions import BatchException
from gitpaq.paq import Paq

from .common import add_config_flag, load_paq

_LOGGER = logging.getLogger(__name__)


class BatchAction:
    """Base class for actions that run one batch operation."""

    command: str
    help: str
    description: str

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                cls.command,
                help=cls.help,
                description=cls.description,
            ),
        )
        add_config_flag(args)
        args.set_defaults(cls=cls)
        return args

    async def execute(self, paq: Paq) -> list[Summary]:
        """Run the batch operations, returning the summary of each."""
        raise NotImplementedError

    async def run(  # type: ignore[no-untyped-def]
        self,
        config,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        paq = await load_paq(config)
        summaries = await self.execute(paq)
        await paq.drain()
        if failed := sum(summary.err for summary in summaries):
            raise BatchException(self.command, failed)


class InstallAction(BatchAction):
    """Clone packages that are declared but not installed."""

    command = "install"
    help = "Install declared packages"
    description = "Clone every declared package that is not on disk yet."

    async def execute(self, paq: Paq) -> list[Summary]:
        return [await paq.install()]


class UpdateAction(BatchAction):
    """Pull installed packages."""

    command = "update"
    help = "Update installed packages"
    description = "Pull every installed package that is not pinned."

    async def execute(self, paq: Paq) -> list[Summary]:
        return [await paq.update()]


class CleanAction(BatchAction):
    """Remove directories of packages that are no longer declared."""

    command = "clean"
    help = "Remove packages that are no longer declared"
    description = "Delete directories in the install root that no package owns."

    async def execute(self, paq: Paq) -> list[Summary]:
        return [await paq.clean()]


class SyncAction(BatchAction):
    """Clean, install and update in one go."""

    command = "sync"
    help = "Clean, install and update packages"
    description = (
        "Remove packages that are no longer declared, then install missing "
        "packages and update installed ones."
    )

    async def execute(self, paq: Paq) -> list[Summary]:
        return [await paq.clean(), await paq.sync(clean=False)]
