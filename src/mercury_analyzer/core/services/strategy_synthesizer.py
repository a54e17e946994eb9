from __future__ import annotations

from ..domain.models import (
    BackupPolicy,
    BuildConfig,
    CostEstimate,
    CostItem,
    DeploymentApproach,
    DeploymentStep,
    DeploymentStrategy,
    FirewallRule,
    HealthCheck,
    InfrastructureRecommendation,
    InstanceSpec,
    LoggingPolicy,
    MonitoringConfiguration,
    NetworkSpec,
    Requirements,
    RollbackStrategy,
    ScalingPolicy,
    SecurityConfiguration,
    StrategyType,
    TechStack,
)
from ..domain.units import parse_size_mb
from .instance_catalog import lookup_instance


DEFAULT_PROVIDER = "digitalocean"
INSTANCE_STORAGE = "25GB"

_CLONE = ("Clone repository", "Clone source code to deployment server", 60)
_HEALTH = ("Health check", "Verify application is healthy", 60)
_PROXY = ("Update reverse proxy", "Configure Nginx/Caddy for new deployment", 30)

CONTAINER_STEPS = (
    _CLONE,
    ("Build Docker image", "Build application Docker image", 300),
    ("Stop existing container", "Stop current application container if running", 30),
    ("Start new container", "Start new application container", 60),
    _HEALTH,
    _PROXY,
)

NODE_STEPS = (
    _CLONE,
    ("Install dependencies", "Install Node.js dependencies", 180),
    ("Build application", "Build application if needed", 300),
    ("Stop existing process", "Stop current application process", 30),
    ("Start with PM2", "Start application with PM2 process manager", 60),
    _HEALTH,
    _PROXY,
)

PYTHON_STEPS = (
    _CLONE,
    ("Create virtual environment", "Create Python virtual environment", 30),
    ("Install dependencies", "Install Python dependencies", 180),
    ("Run migrations", "Run database migrations if needed", 120),
    ("Stop existing service", "Stop current application service", 30),
    ("Start with Gunicorn", "Start application with Gunicorn WSGI server", 60),
    _HEALTH,
    ("Update reverse proxy", "Configure Nginx for new deployment", 30),
)

DEFAULT_STEPS = (
    _CLONE,
    ("Install dependencies", "Install application dependencies", 180),
    ("Build application", "Build/compile application", 300),
    ("Deploy application", "Deploy application to target location", 60),
    _HEALTH,
)

FIREWALL_RULES = (
    FirewallRule(port=22, protocol="tcp", source="specific", description="SSH access"),
    FirewallRule(port=80, protocol="http", source="any", description="HTTP traffic"),
    FirewallRule(port=443, protocol="https", source="any", description="HTTPS traffic"),
)


def _numbered(table) -> tuple[DeploymentStep, ...]:
    return tuple(
        DeploymentStep(order=i, name=name, description=description, timeout=timeout)
        for i, (name, description, timeout) in enumerate(table, 1)
    )


def deployment_steps(stack: TechStack, build_config: BuildConfig) -> tuple[DeploymentStep, ...]:
    if build_config.has_dockerfile:
        return _numbered(CONTAINER_STEPS)
    if stack.runtime == "nodejs":
        return _numbered(NODE_STEPS)
    if stack.runtime == "python":
        return _numbered(PYTHON_STEPS)
    return _numbered(DEFAULT_STEPS)


def recommend_infrastructure(requirements: Requirements) -> InfrastructureRecommendation:
    """Pick a single-droplet size from recommended CPU and memory.

    Memory is checked first: 4GB or more recommended selects the mid tier even
    when four or more CPUs are also recommended.
    """
    if parse_size_mb(requirements.memory.recommended) >= 4096:
        instance_type = "basic-2vcpu-4gb"
    elif requirements.cpu.recommended >= 4:
        instance_type = "basic-4vcpu-8gb"
    else:
        instance_type = "basic-1vcpu-2gb"
    monthly = lookup_instance(instance_type).monthly

    return InfrastructureRecommendation(
        provider=DEFAULT_PROVIDER,
        instance=InstanceSpec(
            type=instance_type,
            cpu=requirements.cpu.recommended,
            memory=requirements.memory.recommended,
            storage=INSTANCE_STORAGE,
        ),
        network=NetworkSpec(),
        scaling=ScalingPolicy(),
        estimated_cost=CostEstimate(
            monthly=monthly,
            currency="USD",
            breakdown=(CostItem("Droplet", monthly), CostItem("Bandwidth", 0)),
        ),
    )


def synthesize_strategy(
    stack: TechStack,
    build_config: BuildConfig,
    requirements: Requirements,
) -> DeploymentStrategy:
    if build_config.has_dockerfile:
        strategy_type, approach = StrategyType.CONTAINER, DeploymentApproach.DOCKER
    elif stack.runtime == "nodejs":
        strategy_type, approach = StrategyType.SERVER, DeploymentApproach.PM2
    else:
        strategy_type, approach = StrategyType.SERVER, DeploymentApproach.SYSTEMD

    security = SecurityConfiguration(
        https=True,
        firewall=FIREWALL_RULES,
        secrets=tuple(v.name for v in build_config.environment_variables if v.sensitive),
        monitoring=True,
        backups=BackupPolicy(),
    )
    monitoring = MonitoringConfiguration(
        health_check=HealthCheck(),
        metrics=("cpu", "memory", "disk", "network"),
        alerts=(),
        logging=LoggingPolicy(),
    )
    rollback = RollbackStrategy(
        type="manual",
        triggers=("health_check_failed", "deployment_timeout"),
        steps=("stop_new_service", "restore_previous_version", "verify_rollback"),
        timeout=300,
    )

    return DeploymentStrategy(
        type=strategy_type,
        approach=approach,
        steps=deployment_steps(stack, build_config),
        infrastructure=recommend_infrastructure(requirements),
        security=security,
        monitoring=monitoring,
        rollback=rollback,
    )
