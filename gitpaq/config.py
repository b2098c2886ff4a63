"""Configuration objects for gitpaq."""

from dataclasses import dataclass, field
import os
from pathlib import Path

from mashumaro import DataClassDictMixin
from mashumaro.config import BaseConfig

__all__ = [
    "Config",
    "default_manifest_path",
]

DEFAULT_URL_FORMAT = "https://github.com/{}.git"
DEFAULT_JOBS = 20
START_DIR = "start"
OPT_DIR = "opt"


def _xdg_dir(env: str, fallback: str) -> Path:
    """Return an XDG base directory, honoring the environment override."""
    if value := os.environ.get(env):
        return Path(value)
    return Path.home() / fallback


def _default_path() -> Path:
    return _xdg_dir("XDG_DATA_HOME", ".local/share") / "gitpaq" / "pack"


def _default_lock_path() -> Path:
    return _xdg_dir("XDG_DATA_HOME", ".local/share") / "gitpaq" / "gitpaq-lock.json"


def _default_log_path() -> Path:
    return _xdg_dir("XDG_STATE_HOME", ".local/state") / "gitpaq" / "gitpaq.log"


def default_manifest_path() -> Path:
    """Return the default location of the package declaration file."""
    return _xdg_dir("XDG_CONFIG_HOME", ".config") / "gitpaq" / "packages.yaml"


@dataclass
class Config(DataClassDictMixin):
    """Settings shared by all package operations."""

    path: Path = field(default_factory=_default_path)
    """Install root; packages live in `start/` or `opt/` below it."""

    opt: bool = False
    """Default install class for packages that do not set `opt` themselves."""

    verbose: bool = False
    """Report packages that were already up to date."""

    url_format: str = DEFAULT_URL_FORMAT
    """Format string used to turn a short `owner/repo` source into a URL."""

    lock_path: Path = field(default_factory=_default_lock_path)
    """Location of the JSON lock file."""

    log_path: Path = field(default_factory=_default_log_path)
    """Location of the shared subprocess log file."""

    jobs: int = DEFAULT_JOBS
    """Maximum number of git processes running at the same time."""

    exclude: list[str] = field(default_factory=list)
    """Directory names under the install root that are never cleaned."""

    def __post_init__(self) -> None:
        self.path = Path(self.path).expanduser()
        self.lock_path = Path(self.lock_path).expanduser()
        self.log_path = Path(self.log_path).expanduser()
        if self.jobs < 1:
            raise ValueError(f"jobs must be a positive number, got {self.jobs}")

    @property
    def start_dir(self) -> Path:
        """Directory for packages loaded eagerly."""
        return self.path / START_DIR

    @property
    def opt_dir(self) -> Path:
        """Directory for packages loaded on demand."""
        return self.path / OPT_DIR

    class Config(BaseConfig):
        forbid_extra_keys = True
