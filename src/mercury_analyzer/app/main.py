from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from .config import AppConfig
from .container import Container
from ..core.domain.models import RepositoryAnalysis


def _create_container(config: AppConfig | None = None) -> Container:
    """Create and initialize a container.

    Args:
        config: Optional config. If None, loads from environment variables.

    Returns:
        Initialized container instance
    """
    container = Container()

    if config is None:
        # Load from environment variables (BaseSettings default behavior)
        config = AppConfig()

    container.config.from_pydantic(config)
    container.init_resources()

    return container


def analyze_directory(path: str | Path, *, config: AppConfig | None = None) -> RepositoryAnalysis:
    """Analyze a repository that is already checked out locally.

    Args:
        path: Repository root directory
        config: Optional config for testing. If None, loads from env vars.

    Raises:
        AcquisitionError: If ``path`` is not a directory
    """
    container = _create_container(config)
    try:
        uc = container.inspect_uc()
        return uc.execute(
            url=str(path),
            branch=container.config.snapshot.default_branch(),
        )
    finally:
        container.shutdown_resources()


def analyze_repository(
    url: str,
    *,
    branch: str | None = None,
    force_refresh: bool = False,
    config: AppConfig | None = None,
) -> RepositoryAnalysis:
    """Clone (or reuse) a snapshot of ``url`` and analyze it.

    Raises:
        AcquisitionError: If the repository cannot be cloned or updated
    """
    container = _create_container(config)
    try:
        uc = container.analyze_uc()
        return uc.execute(
            url=url,
            branch=branch or container.config.snapshot.default_branch(),
            force_refresh=force_refresh,
        )
    finally:
        container.shutdown_resources()


def call_tool(
    name: str,
    arguments: Mapping[str, Any] | None = None,
    *,
    config: AppConfig | None = None,
) -> dict[str, Any]:
    """Invoke one tool by name and return its result envelope."""
    container = _create_container(config)
    try:
        return container.toolset().call(name, arguments)
    finally:
        container.shutdown_resources()


def clear(config: AppConfig | None = None) -> None:
    """Clear cached snapshots and stored analyses.

    Args:
        config: Optional config for testing. If None, loads from env vars.
    """
    container = _create_container(config)
    try:
        container.clear_cache_uc().execute()
    finally:
        container.shutdown_resources()
