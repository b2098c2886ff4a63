"""In-memory table of declared packages."""

from collections.abc import Iterator, Mapping
import logging
import re
from typing import Any

from .config import Config
from .exceptions import InputException
from .host import Host
from .inspector import RefFileInspector, RepositoryInspector
from .package import Package, PackageFilter, PackageSpec, Status

__all__ = [
    "PackageRegistry",
]

_LOGGER = logging.getLogger(__name__)

URL_RE = re.compile(r"^https?://")
NAME_RE = re.compile(r"/([\w.-]+)$")
VALID_NAME_RE = re.compile(r"^[\w.-]+$")
GIT_SUFFIX = ".git"


def resolve_url(spec: PackageSpec, url_format: str) -> str:
    """Return the explicit URL, the source if it is a URL, or the formatted source."""
    if spec.url:
        return spec.url
    if spec.source is None:
        raise InputException("Package declaration has neither source nor url")
    if URL_RE.match(spec.source):
        return spec.source
    return url_format.format(spec.source)


def infer_name(url: str) -> str | None:
    """Return the last path segment of a URL without a `.git` suffix."""
    if match := NAME_RE.search(url.removesuffix(GIT_SUFFIX)):
        return match.group(1)
    return None


def valid_name(name: object) -> bool:
    """Return True if `name` is usable as a single directory below the install root."""
    return (
        isinstance(name, str)
        and VALID_NAME_RE.match(name) is not None
        and name.strip(".") != ""
    )


class PackageRegistry:
    """Maps package names to their records.

    The registry owns every `Package`; other components get records from it
    and mutate them only from the completion of an operation.
    """

    def __init__(
        self,
        config: Config,
        host: Host,
        inspector: RepositoryInspector | None = None,
    ) -> None:
        """Initialize PackageRegistry."""
        self._config = config
        self._host = host
        self._inspector = inspector or RefFileInspector()
        self._packages: dict[str, Package] = {}

    def __iter__(self) -> Iterator[Package]:
        return iter(list(self._packages.values()))

    def __len__(self) -> int:
        return len(self._packages)

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def get(self, name: str) -> Package | None:
        """Return the record for `name` if one is registered."""
        return self._packages.get(name)

    def clear(self) -> None:
        """Forget every record."""
        self._packages.clear()

    def register(
        self, value: "str | Mapping[str, Any] | PackageSpec"
    ) -> Package | None:
        """Build a record from a declaration and add it to the registry.

        Declarations whose name cannot be resolved are reported and skipped.
        """
        try:
            spec = PackageSpec.parse(value)
            url = resolve_url(spec, self._config.url_format)
        except InputException as err:
            self._report_invalid(value, str(err))
            return None
        if not (name := spec.name or infer_name(url)):
            self._report_invalid(value, "unable to infer a name from the url")
            return None
        if not valid_name(name):
            self._report_invalid(value, f"invalid package name {name!r}")
            return None
        opt = spec.opt if spec.opt is not None else self._config.opt
        pkg_dir = (self._config.opt_dir if opt else self._config.start_dir) / name
        pkg = Package(
            name=name,
            url=url,
            branch=spec.branch,
            dir=pkg_dir,
            status=Status.INSTALLED if pkg_dir.exists() else Status.LISTED,
            hash=self._inspector.get_hash(pkg_dir),
            pin=spec.pin,
            hook=spec.hook,
        )
        if name in self._packages:
            _LOGGER.warning(
                "Package %s declared more than once, keeping the last", name
            )
        _LOGGER.debug("Registered %s (%s) at %s", name, pkg.status.name, pkg_dir)
        self._packages[name] = pkg
        return pkg

    def _report_invalid(self, value: Any, reason: str) -> None:
        _LOGGER.error("Failed to parse %r: %s", value, reason)
        self._host.notify(f"Failed to parse {value!r}: {reason}", logging.ERROR)

    def tombstone(self, name: str) -> Package:
        """Replace the record for `name` with a minimal removed record."""
        pkg = Package.tombstone(name)
        self._packages[name] = pkg
        return pkg

    def filter(self, predicate: PackageFilter) -> list[Package]:
        """Return the records matching the predicate, in declaration order."""
        return [pkg for pkg in self._packages.values() if predicate(pkg)]

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Return a serializable copy of every record without hooks."""
        return {name: pkg.to_dict() for name, pkg in self._packages.items()}
