import json
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

from mercury_analyzer.core.domain.exceptions import AcquisitionError, NonZeroExitError
from mercury_analyzer.core.domain.models import CommandResult, RepositoryHandle


T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def mark_by_dir(items, base_dir, marker):
    base = Path(base_dir).resolve()
    for item in items:
        # pytest 7/8: item.path (Path) on newer versions, item.fspath on older ones
        p = getattr(item, "path", None)
        p = Path(p) if p is not None else Path(str(getattr(item, "fspath")))
        try:
            p.resolve().relative_to(base)
        except ValueError:
            continue
        item.add_marker(marker)


def write_files(root: Path, files: Mapping[str, Any]) -> Path:
    """Create ``files`` under ``root``. Dict/list values are written as JSON."""
    root.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        fp = root / name
        fp.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, (dict, list)):
            content = json.dumps(content)
        fp.write_text(content, encoding="utf-8")
    return root


def make_handle(path: Path, *, url: str = "https://github.com/acme/shop.git", branch: str = "main",
                snapshot_time: datetime = T0, ttl: int = 3600) -> RepositoryHandle:
    return RepositoryHandle(
        id="abc123def4567890",
        url=url,
        name=url.rstrip("/").split("/")[-1].removesuffix(".git"),
        branch=branch,
        local_path=path,
        snapshot_time=snapshot_time,
        expiry_time=snapshot_time + timedelta(seconds=ttl),
    )


class FakeClock:
    def __init__(self, now: datetime = T0):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now = self._now + timedelta(seconds=seconds)


class FakeIdGenerator:
    def __init__(self, value: str = "a1b2c3"):
        self.value = value

    def generate(self) -> str:
        return self.value


class FakeLogger:
    def __init__(self):
        self.records: list[tuple[str, str, dict]] = []

    def _log(self, level: str, message: str, **kwargs) -> None:
        self.records.append((level, message, kwargs))

    def debug(self, message: str, **kwargs) -> None:
        self._log("debug", message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log("info", message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log("warning", message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        self._log("error", message, **kwargs)

    def exception(self, message: str, **kwargs) -> None:
        self._log("exception", message, **kwargs)

    def events(self) -> list[str]:
        return [message for _, message, _ in self.records]


class FakeSnapshotStore:
    """Maps repository URLs to prepared local directories."""

    def __init__(self, repos: Optional[Mapping[str, Path]] = None, clock: Optional[FakeClock] = None):
        self.repos = dict(repos or {})
        self.clock = clock or FakeClock()
        self.acquired: list[tuple[str, str, bool]] = []
        self.handles: dict[str, RepositoryHandle] = {}
        self.cleared = False
        self.held = 0

    def acquire(self, *, url: str, branch: str, force_refresh: bool = False) -> RepositoryHandle:
        self.acquired.append((url, branch, force_refresh))
        path = self.repos.get(url)
        if path is None:
            raise AcquisitionError(url, branch)
        handle = make_handle(path, url=url, branch=branch, snapshot_time=self.clock.now())
        self.handles[url] = handle
        return handle

    @contextmanager
    def checkout(self, *, url: str, branch: str, force_refresh: bool = False):
        handle = self.acquire(url=url, branch=branch, force_refresh=force_refresh)
        self.held += 1
        try:
            yield handle
        finally:
            self.held -= 1

    def lookup(self, url: str) -> Optional[RepositoryHandle]:
        return self.handles.get(url)

    def clear(self) -> None:
        self.cleared = True
        self.handles.clear()


class FakeCommandRunner:
    def __init__(self, fail_on: Optional[str] = None):
        self.calls: list[tuple[tuple[str, ...], Path, Optional[float]]] = []
        self.fail_on = fail_on

    def run(self, argv, *, cwd, env=None, timeout=None) -> CommandResult:
        argv = tuple(argv)
        self.calls.append((argv, cwd, timeout))
        if self.fail_on is not None and self.fail_on in argv:
            result = CommandResult(argv=argv, exit_code=1, stdout="", stderr="boom", duration_ms=3)
            raise NonZeroExitError(argv, result)
        return CommandResult(argv=argv, exit_code=0, stdout="ok\n", stderr="", duration_ms=5)

    def commands(self) -> list[tuple[str, ...]]:
        return [argv for argv, _, _ in self.calls]


class FakeAnalysisStore:
    def __init__(self):
        self.saved: dict[str, dict] = {}

    def save(self, repository_id: str, payload: dict) -> None:
        self.saved[repository_id] = payload

    def load(self, repository_id: str) -> Optional[dict]:
        return self.saved.get(repository_id)


class FakeCache:
    def __init__(self):
        self.cleared = 0

    def clear_all(self) -> None:
        self.cleared += 1


# Sample repositories

NODE_EXPRESS_REPO = {
    "package.json": {
        "name": "shop-api",
        "scripts": {"start": "node server.js", "test": "jest", "build": "tsc"},
        "dependencies": {"express": "^4.18.0", "pg": "^8.11.0"},
        "devDependencies": {"jest": "^29.0.0", "typescript": "^5.0.0"},
    },
    "server.js": "require('express')().listen(3000)\n",
}

DJANGO_REPO = {
    "requirements.txt": "Django==4.2\npsycopg2-binary>=2.9\nredis\n",
    "manage.py": "#!/usr/bin/env python\n",
    ".env.example": "SECRET_KEY=\nDEBUG=True\nDATABASE_URL=postgres://localhost/app\n",
}

DOCKER_REPO = {
    "package.json": {
        "name": "web",
        "scripts": {"start": "node index.js"},
        "dependencies": {"express": "^4.18.0"},
    },
    "Dockerfile": (
        "FROM node:18-alpine AS build\n"
        "WORKDIR /app\n"
        "COPY . .\n"
        "FROM node:18-alpine\n"
        "EXPOSE 3000 9229/tcp\n"
        'CMD ["node", "index.js"]\n'
    ),
}

STATIC_REPO = {
    "index.html": "<html></html>\n",
    "css/site.css": "body {}\n",
}


def init_git_repo(path: Path, files: Mapping[str, Any], branch: str = "main"):
    """Create a git repository at ``path`` with one commit containing ``files``."""
    from git import Repo

    repo = Repo.init(path)
    commit_files(repo, files, "initial commit")
    repo.git.branch("-M", branch)
    return repo


def commit_files(repo, files: Mapping[str, Any], message: str) -> None:
    from git import Actor

    root = Path(repo.working_tree_dir)
    write_files(root, files)
    repo.index.add(list(files))
    actor = Actor("Test User", "test@example.com")
    repo.index.commit(message, author=actor, committer=actor)


SHOP_URL = "https://github.com/acme/shop.git"
BLOG_URL = "git@github.com:acme/blog.git"


def build_toolset(tmp_path: Path, *, runner=None, analyze_uc=None, logger=None):
    """ToolSet wired to fakes; SHOP_URL serves the Node repo, BLOG_URL the Django one."""
    from mercury_analyzer.core.services import RepositoryAnalyzer
    from mercury_analyzer.core.toolset import ToolSet
    from mercury_analyzer.core.usecases.analyze import AnalyzeUseCase
    from mercury_analyzer.core.usecases.execute import ExecuteUseCase
    from mercury_analyzer.core.usecases.repository_cache import RepositoryCacheUseCase

    clock = FakeClock()
    logger = logger or FakeLogger()
    snapshots = FakeSnapshotStore({
        SHOP_URL: write_files(tmp_path / "shop", NODE_EXPRESS_REPO),
        BLOG_URL: write_files(tmp_path / "blog", DJANGO_REPO),
    }, clock=clock)
    store = FakeAnalysisStore()
    analyzer = RepositoryAnalyzer(clock=clock, logger=logger)
    return ToolSet(
        analyze_uc=analyze_uc or AnalyzeUseCase(snapshots=snapshots, analyzer=analyzer, analysis_store=store),
        cache_uc=RepositoryCacheUseCase(snapshots=snapshots, analysis_store=store, clock=clock),
        execute_uc=ExecuteUseCase(
            snapshots=snapshots,
            runner=runner or FakeCommandRunner(),
            logger=logger,
            packages_dir=tmp_path / "packages",
            command_timeout=600,
        ),
        clock=clock,
        id_gen=FakeIdGenerator(),
        logger=logger,
    )
