"""Tests for revision lookup."""

from pathlib import Path

import pytest

from gitpaq.inspector import GitPythonInspector, RefFileInspector

from .conftest import commit, git, make_repo, requires_git

REVISION = "0123456789abcdef0123456789abcdef01234567"


def write_git_file(repo: Path, name: str, content: str) -> None:
    path = repo / ".git" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


def test_symbolic_ref(tmp_path: Path) -> None:
    """Test HEAD pointing at a branch is resolved through the branch ref."""
    write_git_file(tmp_path, "HEAD", "ref: refs/heads/main\n")
    write_git_file(tmp_path, "refs/heads/main", f"{REVISION}\n")
    assert RefFileInspector().get_hash(tmp_path) == REVISION


def test_detached_head(tmp_path: Path) -> None:
    """Test a detached HEAD holds the revision itself."""
    write_git_file(tmp_path, "HEAD", f"{REVISION}\n")
    assert RefFileInspector().get_hash(tmp_path) == REVISION


def test_packed_ref(tmp_path: Path) -> None:
    """Test refs that only exist in packed-refs."""
    write_git_file(tmp_path, "HEAD", "ref: refs/heads/main\n")
    write_git_file(
        tmp_path,
        "packed-refs",
        "# pack-refs with: peeled fully-peeled sorted\n"
        f"{'f' * 40} refs/heads/other\n"
        f"{REVISION} refs/heads/main\n"
        f"^{'e' * 40}\n",
    )
    assert RefFileInspector().get_hash(tmp_path) == REVISION


@pytest.mark.parametrize(
    ("files"),
    [
        {},
        {"HEAD": "ref: refs/heads/main\n"},
        {"HEAD": ""},
    ],
    ids=["no-git-dir", "missing-ref", "empty-head"],
)
def test_missing_files(tmp_path: Path, files: dict[str, str]) -> None:
    """Test missing metadata yields no revision instead of an error."""
    for name, content in files.items():
        write_git_file(tmp_path, name, content)
    assert RefFileInspector().get_hash(tmp_path) is None
    assert RefFileInspector().get_hash(tmp_path / "does-not-exist") is None


@requires_git
def test_inspectors_agree(tmp_path: Path) -> None:
    """Test the ref file reader matches GitPython on a real repository."""
    repo = make_repo(tmp_path / "repo")
    revision = commit(repo, "Second commit")
    assert RefFileInspector().get_hash(repo) == revision
    assert GitPythonInspector().get_hash(repo) == revision

    git("checkout", "-q", "--detach", "HEAD~1", cwd=repo)
    previous = git("rev-parse", "HEAD", cwd=repo)
    assert RefFileInspector().get_hash(repo) == previous
    assert GitPythonInspector().get_hash(repo) == previous


def test_git_python_not_a_repo(tmp_path: Path) -> None:
    """Test GitPython lookups outside a repository."""
    assert GitPythonInspector().get_hash(tmp_path) is None
    assert GitPythonInspector().get_hash(tmp_path / "does-not-exist") is None
