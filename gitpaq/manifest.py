"""Reading the declaration file that lists the packages to manage.

The declaration file is YAML with an optional `settings` mapping and a
`packages` list:

```yaml
settings:
  path: ~/.local/share/gitpaq/pack
  verbose: true
packages:
  - owner/repo
  - source: owner/other
    as: other-name
    branch: stable
    pin: true
    opt: true
    hook: make
  - url: https://example.com/tool.git
    hook: ":reindex"
```
"""

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any

import aiofiles
from mashumaro.exceptions import MissingField
import yaml

from .config import Config
from .exceptions import InputException

__all__ = [
    "Manifest",
    "read_manifest",
    "parse_manifest",
]

_LOGGER = logging.getLogger(__name__)


@dataclass
class Manifest:
    """Settings and package declarations read from the declaration file."""

    config: Config = field(default_factory=Config)
    """Settings for all operations."""

    packages: list[str | dict[str, Any]] = field(default_factory=list)
    """Raw package declarations in the order they were written."""


def parse_manifest(content: str) -> Manifest:
    """Parse the content of a declaration file."""
    try:
        doc = yaml.safe_load(content)
    except yaml.YAMLError as err:
        raise InputException(
            f"Declaration file failed to parse as yaml: {err}"
        ) from err
    if doc is None:
        return Manifest()
    if not isinstance(doc, dict):
        raise InputException(f"Declaration file expected a mapping but was: {doc}")
    if extra := set(doc) - {"settings", "packages"}:
        raise InputException(f"Declaration file has unknown keys: {sorted(extra)}")
    settings = doc.get("settings") or {}
    if not isinstance(settings, dict):
        raise InputException(f"Invalid settings, expected a mapping: {settings}")
    try:
        config = Config.from_dict(settings)
    except (MissingField, ValueError, TypeError) as err:
        raise InputException(f"Invalid settings: {err}") from err
    packages = doc.get("packages") or []
    if not isinstance(packages, list):
        raise InputException(f"Invalid packages, expected a list: {packages}")
    return Manifest(config=config, packages=packages)


async def read_manifest(manifest_path: Path) -> Manifest:
    """Return the contents of a declaration file."""
    _LOGGER.debug("Reading declarations from %s", manifest_path)
    try:
        async with aiofiles.open(str(manifest_path)) as manifest_file:
            content = await manifest_file.read()
    except FileNotFoundError as err:
        raise InputException(
            f"Declaration file {manifest_path} does not exist"
        ) from err
    return parse_manifest(content)
