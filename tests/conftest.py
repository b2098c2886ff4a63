"""Fixtures shared by the gitpaq tests."""

import logging
import os
from pathlib import Path
import shutil
import subprocess

import pytest

from gitpaq.config import Config
from gitpaq.exceptions import HookException
from gitpaq.host import Host
from gitpaq.package import Package

_LOGGER = logging.getLogger(__name__)

GIT_ENV = {
    **os.environ,
    "GIT_AUTHOR_NAME": "Test",
    "GIT_AUTHOR_EMAIL": "test@example.com",
    "GIT_COMMITTER_NAME": "Test",
    "GIT_COMMITTER_EMAIL": "test@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
}

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="requires git")


class FakeHost(Host):
    """Host that records everything it is asked to do."""

    def __init__(self) -> None:
        self.messages: list[tuple[int, str]] = []
        self.commands: list[str] = []
        self.loaded: list[str] = []
        self.reloads = 0
        self.done: list[str] = []

    @property
    def errors(self) -> list[str]:
        return [msg for level, msg in self.messages if level >= logging.ERROR]

    @property
    def infos(self) -> list[str]:
        return [msg for level, msg in self.messages if level < logging.ERROR]

    def notify(self, message: str, level: int = logging.INFO) -> None:
        self.messages.append((level, message))

    def execute(self, command: str) -> None:
        self.commands.append(command)
        if command.startswith(":fail"):
            raise HookException(f"Command failed: {command}")

    def load(self, package: Package) -> None:
        self.loaded.append(package.name)

    def reload(self) -> None:
        self.reloads += 1

    def broadcast_done(self, operation: str) -> None:
        self.done.append(str(operation))


@pytest.fixture
def host() -> FakeHost:
    """Fixture for a host recording notifications."""
    return FakeHost()


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Fixture for settings that keep every file inside the test directory."""
    return Config(
        path=tmp_path / "pack",
        lock_path=tmp_path / "state" / "gitpaq-lock.json",
        log_path=tmp_path / "state" / "gitpaq.log",
    )


def git(*args: str, cwd: Path) -> str:
    """Run git synchronously for test setup."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
        env=GIT_ENV,
    )
    return result.stdout.strip()


def commit(repo: Path, message: str, filename: str = "README.md") -> str:
    """Add a commit changing `filename` and return its revision."""
    path = repo / filename
    with path.open("a") as fd:
        fd.write(f"{message}\n")
    git("add", filename, cwd=repo)
    git("commit", "-q", "-m", message, cwd=repo)
    return git("rev-parse", "HEAD", cwd=repo)


def make_repo(path: Path) -> Path:
    """Create a repository with a single commit on `main`."""
    path.mkdir(parents=True)
    git("init", "-q", cwd=path)
    git("symbolic-ref", "HEAD", "refs/heads/main", cwd=path)
    commit(path, "Initial commit")
    return path


@pytest.fixture
def upstream(tmp_path: Path) -> Path:
    """Fixture for a repository that packages are cloned from."""
    if shutil.which("git") is None:
        pytest.skip("requires git")
    return make_repo(tmp_path / "remote" / "upstream")
