"""Test helpers for gitpaq tools."""

from pathlib import Path
from typing import Any

import yaml


def write_declarations(tmp_path: Path, packages: list[Any]) -> Path:
    """Write a declaration file keeping every gitpaq file inside `tmp_path`."""
    manifest_path = tmp_path / "packages.yaml"
    manifest_path.write_text(
        yaml.dump(
            {
                "settings": {
                    "path": str(tmp_path / "pack"),
                    "lock_path": str(tmp_path / "state" / "gitpaq-lock.json"),
                    "log_path": str(tmp_path / "state" / "gitpaq.log"),
                },
                "packages": packages,
            }
        )
    )
    return manifest_path
