"""Tests for command library."""

from pathlib import Path

import pytest

from gitpaq.command import Command, ProcessRunner, process_env
from gitpaq.exceptions import SpawnException
from gitpaq.task import task_service_context


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    """Fixture for the shared log file, in a directory that does not exist yet."""
    return tmp_path / "logs" / "gitpaq.log"


@pytest.fixture
def runner(log_path: Path) -> ProcessRunner:
    """Fixture for a ProcessRunner writing to the test log."""
    return ProcessRunner(log_path)


async def test_command_success(runner: ProcessRunner) -> None:
    """Test a command that exits with 0."""
    assert await runner.run(Command(["true"]))


async def test_failed_command(runner: ProcessRunner) -> None:
    """Test a failing command."""
    assert not await runner.run(Command(["/bin/false"]))


async def test_stderr_appended_to_log(runner: ProcessRunner, log_path: Path) -> None:
    """Test stderr goes to the log and stdout is discarded by default."""
    assert await runner.run(Command(["sh", "-c", "echo out; echo first >&2"]))
    assert await runner.run(Command(["sh", "-c", "echo second >&2"]))
    assert log_path.read_text() == "first\nsecond\n"


async def test_print_stdout(runner: ProcessRunner, log_path: Path) -> None:
    """Test stdout is logged when requested."""
    assert await runner.run(Command(["echo", "Hello"], print_stdout=True))
    assert log_path.read_text() == "Hello\n"


async def test_working_directory(runner: ProcessRunner, tmp_path: Path) -> None:
    """Test the command runs in the requested directory."""
    assert await runner.run(Command(["touch", "marker"], cwd=tmp_path))
    assert (tmp_path / "marker").exists()


async def test_spawn_failure(runner: ProcessRunner) -> None:
    """Test a missing binary raises instead of returning a result."""
    with pytest.raises(SpawnException, match="does-not-exist"):
        await runner.run(Command(["does-not-exist-gitpaq"]))


async def test_capture(runner: ProcessRunner) -> None:
    """Test capturing stdout of a command."""
    success, output = await runner.capture(Command(["echo", "Hello"]))
    assert success
    assert output == "Hello\n"


async def test_terminal_prompt_disabled(runner: ProcessRunner) -> None:
    """Test children never prompt for credentials."""
    assert process_env()["GIT_TERMINAL_PROMPT"] == "0"
    _, output = await runner.capture(
        Command(["sh", "-c", "echo $GIT_TERMINAL_PROMPT"])
    )
    assert output == "0\n"


async def test_spawn_callback(runner: ProcessRunner) -> None:
    """Test the callback form reports the exit status exactly once."""
    results: list[bool] = []
    with task_service_context() as task_service:
        runner.spawn(Command(["true"]), results.append)
        runner.spawn(Command(["false"]), results.append)
        await task_service.block_till_done()
    assert sorted(results) == [False, True]


async def test_spawn_callback_not_called_on_spawn_failure(
    runner: ProcessRunner,
) -> None:
    """Test the callback never fires when the process could not start."""
    results: list[bool] = []
    with task_service_context() as task_service:
        task = runner.spawn(Command(["does-not-exist-gitpaq"]), results.append)
        await task_service.block_till_done()
    assert results == []
    assert isinstance(task.exception(), SpawnException)

