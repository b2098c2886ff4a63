"""Tests for finding and removing package directories."""

from pathlib import Path

import pytest

from gitpaq.config import Config
from gitpaq.registry import PackageRegistry
from gitpaq.scanner import DirectoryScanner, Unlisted, remove_tree, walk_post_order

from .conftest import FakeHost


def make_tree(root: Path) -> None:
    """Create nested directories and files below `root`."""
    (root / "a" / "b" / "c").mkdir(parents=True)
    (root / "a" / "b" / "c" / "deep.txt").write_text("deep")
    (root / "a" / "file.txt").write_text("a")
    (root / "empty").mkdir()
    (root / "top.txt").write_text("top")
    (root / "link").symlink_to(root / "a")


def test_walk_post_order(tmp_path: Path) -> None:
    """Test children are always visited before their parent."""
    make_tree(tmp_path / "root")
    seen: list[Path] = []
    for entry, _ in walk_post_order(tmp_path / "root"):
        assert not any(parent in seen for parent in entry.parents)
        seen.append(entry)
    assert len(seen) == 8


def test_remove_tree(tmp_path: Path) -> None:
    """Test a nested tree is removed completely."""
    root = tmp_path / "root"
    make_tree(root)
    assert remove_tree(root)
    assert not root.exists()
    assert list(tmp_path.iterdir()) == []


def test_remove_tree_keeps_link_target(tmp_path: Path) -> None:
    """Test symbolic links are removed without following them."""
    target = tmp_path / "target"
    target.mkdir()
    (target / "keep.txt").write_text("keep")
    root = tmp_path / "root"
    root.mkdir()
    (root / "link").symlink_to(target)
    assert remove_tree(root)
    assert (target / "keep.txt").exists()


def test_remove_tree_stops_on_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test removal stops at the first entry that cannot be deleted."""
    root = tmp_path / "root"
    make_tree(root)
    stuck = root / "a" / "b" / "c" / "deep.txt"
    original_unlink = Path.unlink

    def unlink(self: Path, missing_ok: bool = False) -> None:
        if self == stuck:
            raise PermissionError(f"Permission denied: '{self}'")
        original_unlink(self, missing_ok=missing_ok)

    monkeypatch.setattr(Path, "unlink", unlink)
    assert not remove_tree(root)
    assert stuck.exists()
    assert stuck.parent.exists()
    assert root.exists()


def test_remove_missing_tree(tmp_path: Path) -> None:
    """Test removing a directory that does not exist fails."""
    assert not remove_tree(tmp_path / "does-not-exist")


def test_find_unlisted(config: Config, host: FakeHost) -> None:
    """Test directories without a matching package are reported."""
    registry = PackageRegistry(config, host)
    registry.register("owner/kept")
    registry.register({"source": "owner/moved", "opt": True})
    registry.register("owner/gone")
    registry.tombstone("gone")
    for pkg_dir in [
        config.start_dir / "kept",
        config.start_dir / "orphan",
        config.start_dir / "moved",
        config.start_dir / "gone",
        config.opt_dir / "moved",
        config.opt_dir / "lazy-orphan",
        config.start_dir / "self",
    ]:
        pkg_dir.mkdir(parents=True)
    (config.start_dir / "not-a-dir").write_text("file")
    config.exclude = ["self"]

    unlisted = DirectoryScanner(config).find_unlisted(registry)
    assert unlisted == [
        Unlisted("gone", config.start_dir / "gone"),
        Unlisted("moved", config.start_dir / "moved"),
        Unlisted("orphan", config.start_dir / "orphan"),
        Unlisted("lazy-orphan", config.opt_dir / "lazy-orphan"),
    ]


def test_find_unlisted_no_install_root(config: Config, host: FakeHost) -> None:
    """Test nothing is reported before anything was installed."""
    registry = PackageRegistry(config, host)
    assert DirectoryScanner(config).find_unlisted(registry) == []
