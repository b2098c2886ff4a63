"""Discovery and removal of package directories on disk."""

from collections.abc import Iterator
from dataclasses import dataclass
import logging
import os
from pathlib import Path

from .config import Config
from .registry import PackageRegistry

__all__ = [
    "Unlisted",
    "DirectoryScanner",
    "walk_post_order",
    "remove_tree",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Unlisted:
    """A directory under the install root that no package record owns."""

    name: str
    dir: Path


def walk_post_order(path: Path) -> Iterator[tuple[Path, bool]]:
    """Yield `(entry, is_dir)` for everything below `path`, children first.

    Symbolic links are yielded as files and never followed.
    """
    with os.scandir(path) as entries:
        children = list(entries)
    for entry in children:
        is_dir = entry.is_dir(follow_symlinks=False)
        if is_dir:
            yield from walk_post_order(Path(entry.path))
        yield Path(entry.path), is_dir


def remove_tree(path: Path) -> bool:
    """Delete `path` and everything below it.

    Stops at the first entry that cannot be deleted and returns False, leaving
    that entry and its parents in place.
    """
    try:
        for entry, is_dir in walk_post_order(path):
            if is_dir:
                entry.rmdir()
            else:
                entry.unlink()
        path.rmdir()
    except OSError as err:
        _LOGGER.error("Failed to remove %s: %s", path, err)
        return False
    return True


class DirectoryScanner:
    """Finds directories under the install root that no package owns."""

    def __init__(self, config: Config) -> None:
        """Initialize DirectoryScanner."""
        self._config = config

    def find_unlisted(self, registry: PackageRegistry) -> list[Unlisted]:
        """Return directories not matching the `dir` of the package with their name."""
        unlisted: list[Unlisted] = []
        for root in (self._config.start_dir, self._config.opt_dir):
            try:
                with os.scandir(root) as entries:
                    names = sorted(
                        entry.name
                        for entry in entries
                        if entry.is_dir(follow_symlinks=False)
                    )
            except FileNotFoundError:
                continue
            for name in names:
                if name in self._config.exclude:
                    continue
                pkg_dir = root / name
                pkg = registry.get(name)
                if pkg is None or pkg.dir != pkg_dir:
                    _LOGGER.debug("Found unlisted directory %s", pkg_dir)
                    unlisted.append(Unlisted(name=name, dir=pkg_dir))
        return unlisted
