"""Action running the hook of one package."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import cast

from gitpaq.counter import Outcome
from gitpaq.exceptions import BatchException

from .common import add_config_flag, load_paq

_LOGGER = logging.getLogger(__name__)


class RunHookAction:
    """Run the post-operation hook of a package."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "run-hook",
                help="Run the hook of a package",
                description="Run the hook declared for a package again.",
            ),
        )
        add_config_flag(args)
        args.add_argument("name", help="Name of the package")
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        config,
        name: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        paq = await load_paq(config)
        if await paq.run_hook(name) == Outcome.ERR:
            raise BatchException("hook", 1)
