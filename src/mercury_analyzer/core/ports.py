from __future__ import annotations

import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, ContextManager, Mapping, Optional, Protocol, Sequence

from .domain.models import CommandResult, RepositoryHandle


class SnapshotStorePort(Protocol):
    """Port for acquiring time-limited local snapshots of remote repositories.

    Acquisition for the same URL must be serialized by the implementation.
    """

    def acquire(self, *, url: str, branch: str, force_refresh: bool = False) -> RepositoryHandle:
        """Clone or refresh the snapshot for ``url`` and return its handle.

        Raises:
            AcquisitionError: If the remote is unreachable or the branch is missing
        """
        ...

    def checkout(self, *, url: str, branch: str, force_refresh: bool = False) -> ContextManager[RepositoryHandle]:
        """Acquire the snapshot and keep it from being refreshed or removed until the block exits."""
        ...

    def lookup(self, url: str) -> Optional[RepositoryHandle]:
        """Return the existing snapshot handle for ``url`` without touching the network."""
        ...

    def clear(self) -> None:
        ...


class CommandRunnerPort(Protocol):
    """Port for running external programs (git, npm, docker, ...)."""

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """Run ``argv`` in ``cwd``.

        Raises:
            CommandTimeoutError: If the command exceeds ``timeout`` seconds
            NonZeroExitError: If the command exits with a non-zero status
        """
        ...


class AnalysisStorePort(Protocol):
    """Port for persisting the latest analysis summary per repository."""

    def save(self, repository_id: str, payload: dict[str, Any]) -> None:
        ...

    def load(self, repository_id: str) -> Optional[dict[str, Any]]:
        ...


class CachePort(Protocol):
    """Port for cache management."""

    def clear_all(self) -> None:
        """Clear all application caches."""
        ...


class ClockPort(Protocol):
    def now(self) -> datetime:
        ...


class IdGeneratorPort(Protocol):
    def generate(self) -> str:
        ...


class LoggerPort(Protocol):
    """Port for structured logging.

    Extra keyword arguments are attached to the record as structured fields.
    """

    def debug(self, message: str, **kwargs: Any) -> None:
        ...

    def info(self, message: str, **kwargs: Any) -> None:
        ...

    def warning(self, message: str, **kwargs: Any) -> None:
        ...

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        ...

    def exception(self, message: str, **kwargs: Any) -> None:
        ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DefaultIdGenerator:
    def generate(self) -> str:
        return secrets.token_hex(3)
