"""Action for inspecting the log file."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import cast

import aiofiles

from gitpaq.exceptions import InputException

from .common import add_config_flag, load_paq

_LOGGER = logging.getLogger(__name__)


class LogAction:
    """Print, locate or delete the log of git and hook output."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "log",
                help="Show the log of git and hook output",
                description="Print the log file with the output of every git "
                "command and hook, and the changes brought in by updates.",
            ),
        )
        add_config_flag(args)
        group = args.add_mutually_exclusive_group()
        group.add_argument(
            "--path",
            action="store_true",
            help="Print the location of the log file instead of its content",
        )
        group.add_argument(
            "--clean",
            action="store_true",
            help="Delete the log file",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        config,
        path: bool,
        clean: bool,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        paq = await load_paq(config)
        if path:
            print(paq.log_path)
            return
        if clean:
            paq.log_clean()
            return
        try:
            async with aiofiles.open(paq.log_path) as log_file:
                content = await log_file.read()
        except FileNotFoundError as err:
            raise InputException(f"No log file at {paq.log_path}") from err
        print(content, end="")
