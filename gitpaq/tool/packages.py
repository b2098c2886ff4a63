"""Action listing installed and recently removed packages."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import Any, cast

from gitpaq.package import Package

from .common import add_config_flag, load_paq
from .format import JsonFormatter, PrintFormatter, StructFormatter, YamlFormatter

_LOGGER = logging.getLogger(__name__)

COLUMNS = ["marker", "name", "status", "hash"]


def _row(pkg: Package, marker: str) -> dict[str, Any]:
    return {
        "marker": marker,
        "name": pkg.name,
        "status": pkg.status.name.lower(),
        "hash": (pkg.hash or "")[:12],
    }


class ListAction:
    """Print the packages recorded in the lock file."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "list",
                help="List installed and recently removed packages",
                description=(
                    "Print the packages recorded in the lock file. Packages "
                    "cloned in the last operation are marked with '+' and "
                    "updated ones with '*'."
                ),
            ),
        )
        add_config_flag(args)
        args.add_argument(
            "--output",
            "-o",
            choices=["text", "json", "yaml"],
            default="text",
            help="Output format of the command",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        config,
        output: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        paq = await load_paq(config)
        installed, removed = paq.list_packages()
        if output != "text":
            formatter: StructFormatter = (
                JsonFormatter() if output == "json" else YamlFormatter()
            )
            formatter.print(
                {
                    "installed": [pkg.to_dict() for pkg in installed],
                    "removed": [pkg.to_dict() for pkg in removed],
                }
            )
            return
        for header, pkgs in (
            ("Installed packages:", installed),
            ("Recently removed:", removed),
        ):
            if not pkgs:
                continue
            print(header)
            PrintFormatter(keys=COLUMNS).print(
                [_row(pkg, paq.marker(pkg)) for pkg in pkgs]
            )
