from __future__ import annotations

from dependency_injector import containers, providers

from ..core.ports import DefaultIdGenerator, SystemClock
from ..core.services import RepositoryAnalyzer
from ..core.toolset import ToolSet
from ..core.usecases.analyze import AnalyzeUseCase
from ..core.usecases.clear_cache import ClearCacheUseCase
from ..core.usecases.execute import ExecuteUseCase
from ..core.usecases.repository_cache import RepositoryCacheUseCase
from ..infra.analysis_store import AnalysisStore
from ..infra.cache import Cache
from ..infra.command_runner import SubprocessCommandRunner
from ..infra.logging import StructuredLogger
from ..infra.mcp_server import MCPServer
from ..infra.snapshot_store import GitSnapshotStore, LocalDirectorySnapshots


def _subdir(base, name):
    return base / name


class Container(containers.DeclarativeContainer):
    """DI container. Populate ``config`` with ``config.from_pydantic(AppConfig())``."""

    config = providers.Configuration()

    clock = providers.Singleton(SystemClock)
    id_gen = providers.Singleton(DefaultIdGenerator)

    # Logger (Resource: manages lifecycle with init/shutdown)
    logger = providers.Resource(
        StructuredLogger,
        logs_dir=config.directories.logs_dir,
        logger_name=config.logging.logger_name,
        console_output=config.logging.console_output,
        level=config.logging.level,
    )

    analysis_dir = providers.Callable(_subdir, config.directories.results_dir, "analyses")
    packages_dir = providers.Callable(_subdir, config.directories.results_dir, "packages")

    # Adapters
    snapshots = providers.Singleton(
        GitSnapshotStore,
        cache_dir=config.directories.cache_dir,
        clock=clock,
        logger=logger,
        ttl_seconds=config.snapshot.ttl_seconds,
        clone_depth=config.snapshot.clone_depth,
    )

    local_snapshots = providers.Singleton(
        LocalDirectorySnapshots,
        clock=clock,
        ttl_seconds=config.snapshot.ttl_seconds,
    )

    analysis_store = providers.Singleton(
        AnalysisStore,
        analysis_dir=analysis_dir,
    )

    cache = providers.Singleton(
        Cache,
        cache_dir=config.directories.cache_dir,
        analysis_dir=analysis_dir,
    )

    runner = providers.Singleton(
        SubprocessCommandRunner,
        default_timeout=config.execution.command_timeout_seconds,
    )

    # Domain services
    analyzer = providers.Factory(
        RepositoryAnalyzer,
        clock=clock,
        logger=logger,
    )

    # Use cases
    analyze_uc = providers.Factory(
        AnalyzeUseCase,
        snapshots=snapshots,
        analyzer=analyzer,
        analysis_store=analysis_store,
    )

    inspect_uc = providers.Factory(
        AnalyzeUseCase,
        snapshots=local_snapshots,
        analyzer=analyzer,
        analysis_store=analysis_store,
    )

    cache_uc = providers.Factory(
        RepositoryCacheUseCase,
        snapshots=snapshots,
        analysis_store=analysis_store,
        clock=clock,
    )

    execute_uc = providers.Factory(
        ExecuteUseCase,
        snapshots=snapshots,
        runner=runner,
        logger=logger,
        packages_dir=packages_dir,
        command_timeout=config.execution.command_timeout_seconds,
    )

    clear_cache_uc = providers.Factory(
        ClearCacheUseCase,
        cache=cache,
    )

    toolset = providers.Singleton(
        ToolSet,
        analyze_uc=analyze_uc,
        cache_uc=cache_uc,
        execute_uc=execute_uc,
        clock=clock,
        id_gen=id_gen,
        logger=logger,
        default_branch=config.snapshot.default_branch,
    )

    mcp_server = providers.Factory(
        MCPServer,
        toolset=toolset,
        logger=logger,
    )
