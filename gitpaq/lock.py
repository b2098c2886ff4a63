"""Persistence of the package table in a JSON lock file.

The lock file holds a snapshot of every package record except its hook. It is
rewritten in full after each change to a package so that it always describes
a valid state, and it is read back on startup to know which revision each
package was at before an update.
"""

import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any

from mashumaro.exceptions import MissingField

from .exceptions import LockException
from .package import Package
from .registry import PackageRegistry

__all__ = [
    "LockStore",
]

_LOGGER = logging.getLogger(__name__)


def _decode(content: str) -> dict[str, Package]:
    """Parse lock file content into records."""
    try:
        doc = json.loads(content)
    except ValueError as err:
        raise LockException(f"Lock file is not valid json: {err}") from err
    if not isinstance(doc, dict):
        raise LockException(f"Lock file expected an object but was {type(doc)}")
    try:
        return {name: Package.from_dict(value) for name, value in doc.items()}
    except (MissingField, ValueError, TypeError) as err:
        raise LockException(f"Lock file has an invalid package: {err}") from err


class LockStore:
    """Reads and writes the lock snapshot of a registry."""

    def __init__(self, path: Path, registry: PackageRegistry) -> None:
        """Initialize LockStore."""
        self._path = path
        self._registry = registry
        self._snapshot: dict[str, Package] = {}

    @property
    def path(self) -> Path:
        """Location of the lock file."""
        return self._path

    @property
    def snapshot(self) -> dict[str, Package]:
        """The records as last loaded or written."""
        return self._snapshot

    def get(self, name: str) -> Package | None:
        """Return the locked record for `name`."""
        return self._snapshot.get(name)

    def load(self) -> dict[str, Package]:
        """Load the lock file, replacing it with the registry if it is unusable."""
        try:
            content = self._path.read_text()
        except FileNotFoundError:
            _LOGGER.debug("No lock file at %s", self._path)
        except OSError as err:
            _LOGGER.warning("Unable to read lock file %s: %s", self._path, err)
        else:
            try:
                snapshot = _decode(content)
            except LockException as err:
                _LOGGER.warning("Ignoring lock file %s: %s", self._path, err)
            else:
                if snapshot:
                    self._snapshot = snapshot
                    return self._snapshot
        return self.write()

    def write(self) -> dict[str, Package]:
        """Write every registry record to the lock file and return the snapshot."""
        try:
            data: dict[str, Any] = self._registry.to_dict()
            content = json.dumps(data, indent=2, sort_keys=True)
        except (TypeError, ValueError) as err:
            raise LockException(f"Unable to encode lock file: {err}") from err
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # Replace the file in one step so a reader never sees a partial write
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as tmp_file:
                tmp_file.write(content)
            os.replace(tmp_name, self._path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        _LOGGER.debug("Wrote %d packages to %s", len(data), self._path)
        self._snapshot = {
            name: Package.from_dict(value) for name, value in data.items()
        }
        return self._snapshot
