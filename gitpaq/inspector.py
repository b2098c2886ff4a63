"""Lookup of the revision a package checkout is at.

The default implementation reads the git metadata files directly so that
registering many packages never spawns a process.
"""

from abc import ABC, abstractmethod
import logging
from pathlib import Path

import git

__all__ = [
    "RepositoryInspector",
    "RefFileInspector",
    "GitPythonInspector",
]

_LOGGER = logging.getLogger(__name__)

GIT_DIR = ".git"
SYMBOLIC_REF_PREFIX = "ref: "


class RepositoryInspector(ABC):
    """Answers questions about a local checkout."""

    @abstractmethod
    def get_hash(self, path: Path) -> str | None:
        """Return the revision `HEAD` points to, or None if it is unknown."""


def _first_line(path: Path) -> str | None:
    try:
        with path.open() as fd:
            line = fd.readline().strip()
    except OSError:
        return None
    return line or None


def _packed_ref(git_dir: Path, ref: str) -> str | None:
    """Find a ref in `packed-refs`, where git moves refs on gc and clone."""
    try:
        lines = (git_dir / "packed-refs").read_text().splitlines()
    except OSError:
        return None
    for line in lines:
        if line.startswith(("#", "^")):
            continue
        value, _, name = line.partition(" ")
        if name == ref:
            return value
    return None


class RefFileInspector(RepositoryInspector):
    """Reads `HEAD` and the ref it points to from the `.git` directory."""

    def get_hash(self, path: Path) -> str | None:
        git_dir = path / GIT_DIR
        if (head := _first_line(git_dir / "HEAD")) is None:
            return None
        if not head.startswith(SYMBOLIC_REF_PREFIX):
            # Detached HEAD holds the revision itself
            return head
        ref = head.removeprefix(SYMBOLIC_REF_PREFIX)
        if (value := _first_line(git_dir / ref)) is not None:
            return value
        return _packed_ref(git_dir, ref)


class GitPythonInspector(RepositoryInspector):
    """Resolves `HEAD` through GitPython."""

    def get_hash(self, path: Path) -> str | None:
        try:
            repo = git.Repo(str(path))
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
            return None
        try:
            return repo.head.commit.hexsha
        except ValueError as err:
            # Raised for a repository without any commit
            _LOGGER.debug("No revision for %s: %s", path, err)
            return None
        finally:
            repo.close()
