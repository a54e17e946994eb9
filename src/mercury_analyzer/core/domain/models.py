from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


class StackPrimary(str, Enum):
    """Closed vocabulary of primary stacks. UNKNOWN is the explicit fallback."""

    JAVASCRIPT = "javascript"
    PYTHON = "python"
    RUBY = "ruby"
    GO = "go"
    JAVA = "java"
    RUST = "rust"
    PHP = "php"
    STATIC = "static"
    UNKNOWN = "unknown"


class DependencyType(str, Enum):
    PRODUCTION = "production"
    DEVELOPMENT = "development"
    PEER = "peer"
    OPTIONAL = "optional"


class ServiceType(str, Enum):
    DATABASE = "database"
    CACHE = "cache"
    QUEUE = "queue"
    STORAGE = "storage"
    API = "api"
    OTHER = "other"


class StrategyType(str, Enum):
    STATIC = "static"
    SERVER = "server"
    SERVERLESS = "serverless"
    CONTAINER = "container"
    MICROSERVICE = "microservice"


class DeploymentApproach(str, Enum):
    DOCKER = "docker"
    NATIVE = "native"
    PM2 = "pm2"
    SYSTEMD = "systemd"
    KUBERNETES = "kubernetes"


class Severity(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [Severity.LOW, Severity.MODERATE, Severity.HIGH, Severity.CRITICAL]


@dataclass(frozen=True)
class RepositoryHandle:
    """Local snapshot of a remote repository.

    The snapshot is considered stale once the current time passes
    ``expiry_time``; callers decide whether to refresh it.
    """
    id: str
    url: str
    name: str
    branch: str
    local_path: Path
    snapshot_time: datetime
    expiry_time: datetime

    def is_stale(self, now: datetime) -> bool:
        return now > self.expiry_time


@dataclass(frozen=True)
class TechStack:
    primary: StackPrimary = StackPrimary.UNKNOWN
    secondary: tuple[str, ...] = ()
    framework: str | None = None
    language: str = "unknown"
    package_manager: str | None = None
    build_tool: str | None = None
    testing: tuple[str, ...] = ()
    runtime: str | None = None  # e.g. "nodejs", "python", "jvm"

    @property
    def is_known(self) -> bool:
        return self.primary is not StackPrimary.UNKNOWN


@dataclass(frozen=True)
class SecurityVulnerability:
    id: str
    severity: Severity
    title: str
    description: str = ""
    fixed_in: str | None = None


@dataclass(frozen=True)
class Dependency:
    """A declared dependency. Identity is (name, type)."""
    name: str
    version: str = "latest"
    type: DependencyType = DependencyType.PRODUCTION
    vulnerabilities: tuple[SecurityVulnerability, ...] = ()


@dataclass(frozen=True)
class EnvironmentVariable:
    name: str
    required: bool = True
    default_value: str | None = None
    sensitive: bool = False


@dataclass(frozen=True)
class DockerfileAnalysis:
    base_image: str | None = None
    exposed_ports: tuple[int, ...] = ()
    workdir: str | None = None
    multi_stage: bool = False
    healthcheck: bool = False
    entrypoint: str | None = None
    cmd: str | None = None


@dataclass(frozen=True)
class BuildConfig:
    has_dockerfile: bool = False
    dockerfile: DockerfileAnalysis | None = None
    build_script: str | None = None
    start_script: str | None = None
    test_script: str | None = None
    environment_variables: tuple[EnvironmentVariable, ...] = ()

    @property
    def exposed_ports(self) -> tuple[int, ...]:
        return self.dockerfile.exposed_ports if self.dockerfile else ()


@dataclass(frozen=True)
class CpuRequirement:
    min: int = 1
    recommended: int = 1


@dataclass(frozen=True)
class MemoryRequirement:
    min: str = "512MB"
    recommended: str = "1GB"


@dataclass(frozen=True)
class StorageRequirement:
    min: str = "1GB"
    type: str = "ssd"  # ssd | hdd | any


@dataclass(frozen=True)
class NetworkRequirement:
    ports: tuple[int, ...] = (80, 443)
    protocols: tuple[str, ...] = ("http", "https")


@dataclass(frozen=True)
class ExternalService:
    name: str
    type: ServiceType
    required: bool


@dataclass(frozen=True)
class Requirements:
    cpu: CpuRequirement = field(default_factory=CpuRequirement)
    memory: MemoryRequirement = field(default_factory=MemoryRequirement)
    storage: StorageRequirement = field(default_factory=StorageRequirement)
    network: NetworkRequirement = field(default_factory=NetworkRequirement)
    services: tuple[ExternalService, ...] = ()
    constraints: tuple[str, ...] = ()


@dataclass(frozen=True)
class DeploymentStep:
    order: int
    name: str
    description: str
    timeout: int | None = None  # seconds
    retries: int = 0


@dataclass(frozen=True)
class InstanceSpec:
    type: str
    cpu: int
    memory: str
    storage: str


@dataclass(frozen=True)
class NetworkSpec:
    vpc: bool = False
    load_balancer: bool = False
    cdn: bool = False


@dataclass(frozen=True)
class ScalingPolicy:
    min: int = 1
    max: int = 3
    target: str = "cpu"
    threshold: int = 80


@dataclass(frozen=True)
class CostItem:
    component: str
    cost: float
    unit: str = "month"


@dataclass(frozen=True)
class CostEstimate:
    monthly: float
    currency: str = "USD"
    breakdown: tuple[CostItem, ...] = ()


@dataclass(frozen=True)
class InfrastructureRecommendation:
    provider: str
    instance: InstanceSpec
    network: NetworkSpec
    scaling: ScalingPolicy
    estimated_cost: CostEstimate


@dataclass(frozen=True)
class FirewallRule:
    port: int
    protocol: str
    source: str
    description: str


@dataclass(frozen=True)
class BackupPolicy:
    enabled: bool = True
    frequency: str = "daily"
    retention: int = 7  # days
    type: str = "incremental"


@dataclass(frozen=True)
class SecurityConfiguration:
    https: bool
    firewall: tuple[FirewallRule, ...]
    secrets: tuple[str, ...]
    monitoring: bool
    backups: BackupPolicy


@dataclass(frozen=True)
class HealthCheck:
    endpoint: str = "/health"
    interval: int = 30
    timeout: int = 5


@dataclass(frozen=True)
class LoggingPolicy:
    level: str = "info"
    retention: int = 7  # days


@dataclass(frozen=True)
class MonitoringConfiguration:
    health_check: HealthCheck
    metrics: tuple[str, ...]
    alerts: tuple[str, ...]
    logging: LoggingPolicy


@dataclass(frozen=True)
class RollbackStrategy:
    type: str
    triggers: tuple[str, ...]
    steps: tuple[str, ...]
    timeout: int


@dataclass(frozen=True)
class DeploymentStrategy:
    type: StrategyType
    approach: DeploymentApproach
    steps: tuple[DeploymentStep, ...]
    infrastructure: InfrastructureRecommendation
    security: SecurityConfiguration
    monitoring: MonitoringConfiguration
    rollback: RollbackStrategy


@dataclass(frozen=True)
class RepositoryAnalysis:
    """Complete, immutable result of analyzing one repository snapshot."""
    repository: RepositoryHandle
    tech_stack: TechStack
    dependencies: tuple[Dependency, ...]
    build_config: BuildConfig
    requirements: Requirements
    strategy: DeploymentStrategy
    confidence: int
    warnings: tuple[str, ...]
    recommendations: tuple[str, ...]
    analyzed_at: datetime


@dataclass(frozen=True)
class CommandResult:
    argv: tuple[str, ...]
    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.exit_code == 0
