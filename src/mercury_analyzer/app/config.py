from __future__ import annotations

from pathlib import Path
from typing import Literal

from platformdirs import PlatformDirs
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_NAME = "mercury_analyzer"


def _default_home() -> Path:
    """Get default home directory using platformdirs."""
    return Path(PlatformDirs(appname=APP_NAME, appauthor=False).user_cache_dir)


class DirectoryConfig(BaseSettings):
    """Directory configuration with computed paths."""

    model_config = SettingsConfigDict(env_prefix="MERCURY_DIRECTORIES__")

    home: Path = Field(
        default_factory=_default_home,
        description="Base directory for all mercury_analyzer data",
    )

    @computed_field
    @property
    def cache_dir(self) -> Path:
        """Cache directory for repository snapshots."""
        path = self.home / "cache"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def results_dir(self) -> Path:
        """Results directory for stored analyses and packaged artifacts."""
        path = self.home / "results"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def logs_dir(self) -> Path:
        """Logs directory for structured JSON logs."""
        path = self.home / "logs"
        path.mkdir(parents=True, exist_ok=True)
        return path


class SnapshotConfig(BaseSettings):
    """Repository snapshot cache settings."""

    model_config = SettingsConfigDict(env_prefix="MERCURY_SNAPSHOT__")

    ttl_seconds: int = Field(
        default=3600,
        gt=0,
        description="Seconds before a cached snapshot is considered stale",
    )

    default_branch: str = Field(
        default="main",
        description="Branch used when a request does not name one",
    )

    clone_depth: int = Field(
        default=1,
        ge=0,
        description="Shallow clone depth (0 clones full history)",
    )


class ExecutionConfig(BaseSettings):
    """Settings for build/test/package commands."""

    model_config = SettingsConfigDict(env_prefix="MERCURY_EXECUTION__")

    command_timeout_seconds: int = Field(
        default=600,
        gt=0,
        description="Default timeout for each executed command",
    )


class ServerConfig(BaseSettings):
    """MCP server settings."""

    model_config = SettingsConfigDict(env_prefix="MERCURY_SERVER__")

    transport: Literal["stdio", "streamable-http"] = Field(
        default="stdio",
        description="MCP transport",
    )

    host: str = Field(default="127.0.0.1", description="Bind address for streamable-http")

    port: int = Field(default=3007, description="Port for streamable-http")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="MERCURY_LOGGING__")

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")

    console_output: bool = Field(default=False, description="Mirror logs to stderr")

    logger_name: str = Field(default="mercury_analyzer", description="Logger name")


class AppConfig(BaseSettings):
    """Root application configuration.

    All configuration is loaded from environment variables with MERCURY_ prefix.
    Use double underscore for nested config: MERCURY_SNAPSHOT__TTL_SECONDS

    Example env vars:
        export MERCURY_DIRECTORIES__HOME=/custom/path
        export MERCURY_SNAPSHOT__TTL_SECONDS=1800
        export MERCURY_SNAPSHOT__DEFAULT_BRANCH=master
        export MERCURY_EXECUTION__COMMAND_TIMEOUT_SECONDS=900
        export MERCURY_SERVER__TRANSPORT=streamable-http
        export MERCURY_SERVER__PORT=3007
        export MERCURY_LOGGING__LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="MERCURY_",
        env_nested_delimiter="__",
        frozen=True,
        extra="forbid",
    )

    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)
    snapshot: SnapshotConfig = Field(default_factory=SnapshotConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
