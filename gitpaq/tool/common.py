"""Helpers shared by the gitpaq actions."""

from argparse import ArgumentParser
import logging
import pathlib

from gitpaq.config import default_manifest_path
from gitpaq.host import ConsoleHost
from gitpaq.manifest import read_manifest
from gitpaq.paq import Paq

_LOGGER = logging.getLogger(__name__)


def add_config_flag(args: ArgumentParser) -> None:
    """Add the flag selecting the declaration file."""
    args.add_argument(
        "--config",
        "-c",
        type=pathlib.Path,
        default=None,
        help=f"Package declaration file (default: {default_manifest_path()})",
    )


async def load_paq(config: pathlib.Path | None) -> Paq:
    """Build a Paq from the declaration file."""
    manifest = await read_manifest(config or default_manifest_path())
    _LOGGER.debug("Declared %d packages", len(manifest.packages))
    return Paq(manifest.config, ConsoleHost()).declare(manifest.packages)
