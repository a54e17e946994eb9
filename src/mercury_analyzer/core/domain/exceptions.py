"""Domain exceptions for mercury_analyzer."""

from __future__ import annotations

from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import CommandResult


class MercuryError(Exception):
    """Base class for errors raised by the analyzer."""


class AcquisitionError(MercuryError):
    """Raised when a repository snapshot cannot be cloned or updated.

    Covers unreachable remotes, missing branches and authentication failures.
    """

    def __init__(self, url: str, branch: str, message: str | None = None) -> None:
        self.url = url
        self.branch = branch
        if message is None:
            message = f"Failed to acquire {url}@{branch}"
        super().__init__(message)


class CommandExecutionError(MercuryError):
    def __init__(self, argv: Sequence[str], message: str) -> None:
        self.argv = tuple(argv)
        super().__init__(message)


class CommandTimeoutError(CommandExecutionError):
    def __init__(self, argv: Sequence[str], timeout: float) -> None:
        self.timeout = timeout
        super().__init__(argv, f"Command timed out after {timeout:g}s: {' '.join(argv)}")


class NonZeroExitError(CommandExecutionError):
    """Raised when a command exits with a non-zero status. Carries the full result."""

    def __init__(self, argv: Sequence[str], result: "CommandResult") -> None:
        self.result = result
        detail = (result.stderr or result.stdout).strip().splitlines()
        tail = f": {detail[-1]}" if detail else ""
        super().__init__(argv, f"Command failed with exit code {result.exit_code}: {' '.join(argv)}{tail}")


class UnsupportedOperationError(MercuryError):
    """Raised when no command is known for the detected stack."""


class UnknownToolError(MercuryError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")
