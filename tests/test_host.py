"""Tests for the console host."""

import io
import logging

import pytest

from gitpaq.exceptions import HookException
from gitpaq.host import ConsoleHost
from gitpaq.package import Package


@pytest.fixture
def out() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def err() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def host(out: io.StringIO, err: io.StringIO) -> ConsoleHost:
    """Fixture for a console host writing to buffers."""
    return ConsoleHost(out=out, err=err)


def test_notify(host: ConsoleHost, out: io.StringIO, err: io.StringIO) -> None:
    """Test errors go to the error stream and everything else to output."""
    host.notify("[1/1] Installed repo")
    host.notify("[0/1] Failed to update repo", logging.ERROR)
    assert out.getvalue() == "gitpaq: [1/1] Installed repo\n"
    assert err.getvalue() == "gitpaq: [0/1] Failed to update repo\n"


def test_execute_registered_command(host: ConsoleHost) -> None:
    """Test a `:` command is dispatched with its shell-style arguments."""
    calls: list[list[str]] = []
    host.register_command("reindex", calls.append)

    host.execute(":reindex docs 'two words'")
    host.execute(":reindex")
    assert calls == [["docs", "two words"], []]


def test_execute_failures(host: ConsoleHost) -> None:
    """Test unknown or empty commands and failing handlers."""

    def broken(args: list[str]) -> None:
        raise HookException(f"broken with {args}")

    host.register_command("broken", broken)
    with pytest.raises(HookException, match="Unknown host command 'missing'"):
        host.execute(":missing")
    with pytest.raises(HookException, match="Empty host command"):
        host.execute(":")
    with pytest.raises(HookException, match="broken with"):
        host.execute(":broken now")


def test_done_listener(host: ConsoleHost) -> None:
    """Test listeners receive each batch completion until they unsubscribe."""
    first: list[str] = []
    second: list[str] = []
    remove_first = host.add_done_listener(first.append)
    host.add_done_listener(second.append)

    host.broadcast_done("install")
    remove_first()
    host.broadcast_done("update")

    assert first == ["install"]
    assert second == ["install", "update"]


def test_load(host: ConsoleHost) -> None:
    """Test loaded packages are remembered once."""
    pkg = Package(name="repo")
    host.load(pkg)
    host.load(pkg)
    assert host.loaded == ["repo"]
