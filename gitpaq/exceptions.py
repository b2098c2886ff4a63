"""Exceptions related to gitpaq."""

__all__ = [
    "GitPaqException",
    "InputException",
    "CommandException",
    "SpawnException",
    "LockException",
    "HookException",
    "CounterException",
    "BatchException",
]


class GitPaqException(Exception):
    """Generic base exception used for this library."""


class InputException(GitPaqException):
    """Raised when package declarations or settings are not formatted as expected."""


class CommandException(GitPaqException):
    """Raised when there is a failure running a subcommand."""


class SpawnException(CommandException):
    """Raised when a subprocess could not be started at all."""

    def __init__(self, command: str, error: OSError) -> None:
        super().__init__(f"Failed to spawn '{command}': {error}")
        self.command = command
        self.error = error


class LockException(GitPaqException):
    """Raised when the lock file cannot be encoded or decoded."""


class HookException(GitPaqException):
    """Raised when a host command hook fails."""


class CounterException(GitPaqException):
    """Raised when an operation counter receives more results than expected."""


class BatchException(GitPaqException):
    """Raised when a batch finished with one or more failed packages."""

    def __init__(self, operation: str, failed: int) -> None:
        super().__init__(
            f"{operation} failed for {failed} package(s), see the log file"
        )
        self.operation = operation
        self.failed = failed
