"""Command line tool for installing, updating and removing git packages."""

import argparse
import asyncio
import logging
import sys
import traceback

from gitpaq.exceptions import GitPaqException
from . import batch, hook, log, packages

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for managing packages fetched with git.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    batch.InstallAction.register(subparsers)
    batch.UpdateAction.register(subparsers)
    batch.CleanAction.register(subparsers)
    batch.SyncAction.register(subparsers)
    packages.ListAction.register(subparsers)
    log.LogAction.register(subparsers)
    hook.RunHookAction.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    """gitpaq command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except GitPaqException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("gitpaq error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
