"""Tests for Pydantic BaseSettings configuration."""
from pathlib import Path

import pytest
from pydantic import ValidationError

from mercury_analyzer.app.config import (
    AppConfig,
    DirectoryConfig,
    ExecutionConfig,
    LoggingConfig,
    ServerConfig,
    SnapshotConfig,
)


def test_directory_config_computed_paths(tmp_path):
    """Computed paths live under home and are created on access."""
    config = DirectoryConfig(home=tmp_path)

    assert config.cache_dir == tmp_path / "cache"
    assert config.results_dir == tmp_path / "results"
    assert config.logs_dir == tmp_path / "logs"
    assert config.cache_dir.exists()
    assert config.results_dir.exists()
    assert config.logs_dir.exists()


def test_group_defaults(monkeypatch):
    for name in ("HOST", "PORT", "TRANSPORT", "LEVEL"):
        monkeypatch.setenv(name, "should-be-ignored")

    assert SnapshotConfig().ttl_seconds == 3600
    assert SnapshotConfig().default_branch == "main"
    assert SnapshotConfig().clone_depth == 1
    assert ExecutionConfig().command_timeout_seconds == 600
    assert ServerConfig().transport == "stdio"
    assert ServerConfig().host == "127.0.0.1"
    assert ServerConfig().port == 3007
    assert LoggingConfig().level == "INFO"
    assert LoggingConfig().console_output is False


def test_app_config_from_env(monkeypatch, tmp_path):
    """AppConfig loads nested values from MERCURY_ environment variables."""
    monkeypatch.setenv("MERCURY_DIRECTORIES__HOME", str(tmp_path))
    monkeypatch.setenv("MERCURY_SNAPSHOT__TTL_SECONDS", "1800")
    monkeypatch.setenv("MERCURY_SNAPSHOT__DEFAULT_BRANCH", "master")
    monkeypatch.setenv("MERCURY_EXECUTION__COMMAND_TIMEOUT_SECONDS", "900")
    monkeypatch.setenv("MERCURY_SERVER__TRANSPORT", "streamable-http")
    monkeypatch.setenv("MERCURY_SERVER__PORT", "8080")
    monkeypatch.setenv("MERCURY_LOGGING__LEVEL", "DEBUG")

    config = AppConfig()

    assert config.directories.home == Path(tmp_path)
    assert config.snapshot.ttl_seconds == 1800
    assert config.snapshot.default_branch == "master"
    assert config.execution.command_timeout_seconds == 900
    assert config.server.transport == "streamable-http"
    assert config.server.port == 8080
    assert config.logging.level == "DEBUG"


def test_app_config_explicit_values(tmp_path):
    config = AppConfig(
        directories=DirectoryConfig(home=tmp_path),
        snapshot=SnapshotConfig(ttl_seconds=60, clone_depth=0),
    )

    assert config.directories.cache_dir == tmp_path / "cache"
    assert config.snapshot.ttl_seconds == 60
    assert config.snapshot.clone_depth == 0


def test_app_config_is_frozen(tmp_path):
    config = AppConfig(directories=DirectoryConfig(home=tmp_path))
    with pytest.raises(ValidationError):
        config.snapshot = SnapshotConfig()


def test_app_config_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        AppConfig(unknown_group={})


def test_invalid_values_are_rejected(monkeypatch):
    monkeypatch.setenv("MERCURY_SERVER__TRANSPORT", "carrier-pigeon")
    with pytest.raises(ValidationError):
        AppConfig()

    with pytest.raises(ValidationError):
        SnapshotConfig(ttl_seconds=0)


def test_model_dump_includes_computed_dirs(tmp_path):
    """The DI container reads directories from model_dump()."""
    dumped = AppConfig(directories=DirectoryConfig(home=tmp_path)).model_dump()
    assert dumped["directories"]["logs_dir"] == tmp_path / "logs"
    assert dumped["directories"]["cache_dir"] == tmp_path / "cache"
