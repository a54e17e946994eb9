from __future__ import annotations

import hashlib
import json
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterator, Optional

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from ..core.domain.exceptions import AcquisitionError
from ..core.domain.models import RepositoryHandle
from ..core.ports import ClockPort, LoggerPort
from ..shared.rmtree_force import rmtree_force

debug_logger = logging.getLogger(__name__)

METADATA_FILE = ".mercury-snapshot.json"


def repository_id(url: str) -> str:
    """Deterministic identifier for a repository URL."""
    return hashlib.sha256(url.strip().encode("utf-8")).hexdigest()[:16]


def repository_name(url: str) -> str:
    slug = url.rstrip("/").split("/")[-1].split(":")[-1]
    if slug.endswith(".git"):
        slug = slug[:-4]
    return slug or "repository"


class GitSnapshotStore:
    """Time-limited shallow clones kept under ``<cache_dir>/repos/<id>``.

    A sidecar metadata file records when the snapshot was taken. Acquisition
    for one URL is serialized with a per-id lock; different URLs proceed in
    parallel. ``checkout`` holds that lock until its block exits, so a reader
    never sees the directory refreshed, re-cloned or removed underneath it.
    """

    def __init__(
        self,
        *,
        cache_dir: Path,
        clock: ClockPort,
        logger: LoggerPort,
        ttl_seconds: int = 3600,
        clone_depth: int = 1,
    ) -> None:
        self._repos_dir = cache_dir / "repos"
        self._clock = clock
        self._logger = logger
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clone_depth = clone_depth
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, repo_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(repo_id, threading.Lock())

    def _path_for(self, repo_id: str) -> Path:
        return self._repos_dir / repo_id

    def _handle(self, url: str, branch: str, path: Path, snapshot_time: datetime) -> RepositoryHandle:
        return RepositoryHandle(
            id=repository_id(url),
            url=url,
            name=repository_name(url),
            branch=branch,
            local_path=path,
            snapshot_time=snapshot_time,
            expiry_time=snapshot_time + self._ttl,
        )

    def _write_metadata(self, path: Path, url: str, branch: str, snapshot_time: datetime) -> None:
        meta = {"url": url, "branch": branch, "snapshot_time": snapshot_time.isoformat()}
        (path / METADATA_FILE).write_text(json.dumps(meta, indent=2), encoding="utf-8")

    def _read_metadata(self, path: Path) -> Optional[dict]:
        fp = path / METADATA_FILE
        if not fp.exists():
            return None
        try:
            return json.loads(fp.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            debug_logger.debug("Unreadable snapshot metadata: %s", fp)
            return None

    def lookup(self, url: str) -> Optional[RepositoryHandle]:
        path = self._path_for(repository_id(url))
        meta = self._read_metadata(path)
        if meta is None:
            return None
        try:
            snapshot_time = datetime.fromisoformat(meta["snapshot_time"])
            branch = str(meta.get("branch", "main"))
        except (KeyError, TypeError, ValueError, AttributeError):
            # a truncated sidecar means the snapshot is re-cloned on next acquire
            debug_logger.debug("Malformed snapshot metadata: %s", path / METADATA_FILE)
            return None
        return self._handle(url, branch, path, snapshot_time)

    def acquire(self, *, url: str, branch: str, force_refresh: bool = False) -> RepositoryHandle:
        repo_id = repository_id(url)
        with self._lock_for(repo_id):
            return self._acquire_locked(repo_id, url, branch, force_refresh)

    @contextmanager
    def checkout(self, *, url: str, branch: str, force_refresh: bool = False) -> Iterator[RepositoryHandle]:
        repo_id = repository_id(url)
        with self._lock_for(repo_id):
            yield self._acquire_locked(repo_id, url, branch, force_refresh)

    def _acquire_locked(self, repo_id: str, url: str, branch: str, force_refresh: bool) -> RepositoryHandle:
        path = self._path_for(repo_id)
        existing = self.lookup(url)
        now = self._clock.now()

        if existing is not None and existing.branch != branch:
            # switching branches on a shallow clone is unreliable; start over
            rmtree_force(path)
            existing = None

        if existing is not None and not force_refresh and not existing.is_stale(now):
            self._logger.info("snapshot_reused", type="snapshot_reused", repository_id=repo_id, url=url)
            return existing

        try:
            if existing is not None and (path / ".git").exists():
                self._refresh(path, branch)
                event = "snapshot_refreshed"
            else:
                self._clone(url, branch, path)
                event = "snapshot_acquired"
        except (GitCommandError, InvalidGitRepositoryError, NoSuchPathError) as e:
            raise AcquisitionError(url, branch, f"Failed to acquire {url}@{branch}: {e}") from e

        self._write_metadata(path, url, branch, now)
        self._logger.info(event, type=event, repository_id=repo_id, url=url, branch=branch)
        return self._handle(url, branch, path, now)

    def _clone(self, url: str, branch: str, path: Path) -> None:
        if path.exists():
            rmtree_force(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        kwargs = {"branch": branch, "single_branch": True}
        if self._clone_depth > 0:
            kwargs["depth"] = self._clone_depth
        Repo.clone_from(url, path, **kwargs)

    def _refresh(self, path: Path, branch: str) -> None:
        repo = Repo(path)
        repo.remotes.origin.fetch(branch)
        repo.git.checkout(branch)
        repo.git.reset("--hard", f"origin/{branch}")

    def clear(self) -> None:
        rmtree_force(self._repos_dir)


class LocalDirectorySnapshots:
    """Treat an existing local directory as a snapshot; nothing is cloned."""

    def __init__(self, *, clock: ClockPort, ttl_seconds: int = 3600) -> None:
        self._clock = clock
        self._ttl = timedelta(seconds=ttl_seconds)

    def acquire(self, *, url: str, branch: str, force_refresh: bool = False) -> RepositoryHandle:
        path = Path(url).expanduser().resolve()
        if not path.is_dir():
            raise AcquisitionError(url, branch, f"Not a directory: {path}")
        now = self._clock.now()
        return RepositoryHandle(
            id=repository_id(str(path)),
            url=str(path),
            name=path.name or "repository",
            branch=branch,
            local_path=path,
            snapshot_time=now,
            expiry_time=now + self._ttl,
        )

    @contextmanager
    def checkout(self, *, url: str, branch: str, force_refresh: bool = False) -> Iterator[RepositoryHandle]:
        yield self.acquire(url=url, branch=branch, force_refresh=force_refresh)

    def lookup(self, url: str) -> Optional[RepositoryHandle]:
        return None

    def clear(self) -> None:
        return None
