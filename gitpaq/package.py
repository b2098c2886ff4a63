"""Representation of a managed source package.

A `Package` is the record kept for each declared source: where it is fetched
from, where it is installed and what state the last operation left it in. A
`PackageSpec` is the user declaration a record is built from.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any

from mashumaro import DataClassDictMixin
from mashumaro.config import BaseConfig
from mashumaro.helper import pass_through

from .exceptions import InputException
from .hook import Hook, parse_hook

__all__ = [
    "Status",
    "Package",
    "PackageSpec",
    "not_removed",
    "removed",
    "to_install",
    "installed",
    "to_update",
]

SPEC_KEYS = {"source", "url", "as", "branch", "pin", "opt", "hook"}


class Status(IntEnum):
    """Lifecycle state of a package, stored as its integer code in the lock file."""

    INSTALLED = 0
    CLONED = 1
    UPDATED = 2
    REMOVED = 3
    LISTED = 4


@dataclass
class Package(DataClassDictMixin):
    """Identity and mutable state for one managed source."""

    name: str
    """Unique name of the package, the registry key."""

    status: Status = Status.LISTED
    """Result of the last operation applied to the package."""

    url: str | None = None
    """The location the package is cloned from."""

    branch: str | None = None
    """Optional branch to clone instead of the remote default."""

    dir: Path | None = None
    """Absolute install directory."""

    hash: str | None = None
    """Last known revision of the checkout."""

    pin: bool | None = None
    """Pinned packages are never updated."""

    hook: Hook | None = field(
        default=None,
        metadata={"serialize": "omit", "serialization_strategy": pass_through},
    )
    """Action run after a successful clone or update."""

    @classmethod
    def tombstone(cls, name: str) -> "Package":
        """Return the minimal record left behind once a package is removed."""
        return cls(name=name, status=Status.REMOVED)

    class Config(BaseConfig):
        omit_none = True


@dataclass
class PackageSpec:
    """A declaration of a package before it is resolved into a `Package`."""

    source: str | None = None
    """Short `owner/repo` name or full URL."""

    url: str | None = None
    """Explicit URL, takes precedence over `source`."""

    name: str | None = None
    """Explicit package name (the `as` key)."""

    branch: str | None = None

    pin: bool = False

    opt: bool | None = None
    """Install class override; `None` defers to the global setting."""

    hook: Hook | None = None

    @classmethod
    def parse(cls, value: "str | Mapping[str, Any] | PackageSpec") -> "PackageSpec":
        """Parse a declaration given as a string, mapping or existing spec."""
        if isinstance(value, PackageSpec):
            return value
        if isinstance(value, str):
            return cls(source=value)
        if not isinstance(value, Mapping):
            raise InputException(f"Invalid package declaration: {value!r}")
        if extra := set(value) - SPEC_KEYS:
            raise InputException(
                f"Invalid package declaration {value!r} has unknown keys: "
                f"{sorted(extra)}"
            )
        if not value.get("source") and not value.get("url"):
            raise InputException(
                f"Invalid package declaration missing source or url: {value!r}"
            )
        hook: Hook | None = None
        if (raw_hook := value.get("hook")) is not None:
            hook = parse_hook(raw_hook)
        return cls(
            source=value.get("source"),
            url=value.get("url"),
            name=value.get("as"),
            branch=value.get("branch"),
            pin=bool(value.get("pin", False)),
            opt=value.get("opt"),
            hook=hook,
        )


PackageFilter = Callable[[Package], bool]


def not_removed(pkg: Package) -> bool:
    return pkg.status != Status.REMOVED


def removed(pkg: Package) -> bool:
    return pkg.status == Status.REMOVED


def to_install(pkg: Package) -> bool:
    return pkg.status == Status.LISTED


def installed(pkg: Package) -> bool:
    return pkg.status not in (Status.REMOVED, Status.LISTED)


def to_update(pkg: Package) -> bool:
    """Return True for packages on disk that are not pinned."""
    return installed(pkg) and not pkg.pin
