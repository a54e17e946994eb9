from __future__ import annotations

from ..domain.models import (
    BuildConfig,
    CpuRequirement,
    Dependency,
    DependencyType,
    ExternalService,
    MemoryRequirement,
    NetworkRequirement,
    Requirements,
    ServiceType,
    StackPrimary,
    StorageRequirement,
    TechStack,
)
from ..domain.units import scale_size


BASE_PORTS = (80, 443)
LARGE_DEPENDENCY_COUNT = 50
LARGE_DEPENDENCY_MEMORY_FACTOR = 1.5
JS_META_FRAMEWORKS = ("nextjs", "nuxt")

# dependency name (lowercase) -> service name
SERVICE_DEPENDENCIES = {
    "mysql": "mysql",
    "mysql2": "mysql",
    "pymysql": "mysql",
    "mysqlclient": "mysql",
    "pg": "postgresql",
    "postgres": "postgresql",
    "psycopg2": "postgresql",
    "psycopg2-binary": "postgresql",
    "mongodb": "mongodb",
    "mongoose": "mongodb",
    "pymongo": "mongodb",
    "motor": "mongodb",
    "redis": "redis",
    "ioredis": "redis",
    "sqlite3": "sqlite",
}


def _sizing(stack: TechStack) -> tuple[CpuRequirement, MemoryRequirement]:
    if stack.primary is StackPrimary.JAVASCRIPT:
        if stack.framework in JS_META_FRAMEWORKS:
            return CpuRequirement(2, 4), MemoryRequirement("2GB", "4GB")
        return CpuRequirement(1, 1), MemoryRequirement("1GB", "2GB")
    if stack.primary is StackPrimary.PYTHON and stack.framework == "django":
        return CpuRequirement(2, 2), MemoryRequirement("1GB", "2GB")
    if stack.primary is StackPrimary.JAVA:
        return CpuRequirement(2, 4), MemoryRequirement("2GB", "4GB")
    return CpuRequirement(1, 1), MemoryRequirement("512MB", "1GB")


def detect_services(dependencies: tuple[Dependency, ...]) -> tuple[ExternalService, ...]:
    """Map well-known client libraries to the backing services they imply.

    One entry per service; it is required when any matching dependency is a
    production dependency.
    """
    found: dict[str, bool] = {}
    for dep in dependencies:
        service = SERVICE_DEPENDENCIES.get(dep.name.lower())
        if service is None:
            continue
        required = dep.type is DependencyType.PRODUCTION
        found[service] = found.get(service, False) or required
    return tuple(
        ExternalService(
            name=name,
            type=ServiceType.CACHE if "redis" in name else ServiceType.DATABASE,
            required=required,
        )
        for name, required in found.items()
    )


def calculate_requirements(
    stack: TechStack,
    dependencies: tuple[Dependency, ...],
    build_config: BuildConfig,
) -> Requirements:
    cpu, memory = _sizing(stack)
    if len(dependencies) > LARGE_DEPENDENCY_COUNT:
        memory = MemoryRequirement(
            min=memory.min,
            recommended=scale_size(memory.recommended, LARGE_DEPENDENCY_MEMORY_FACTOR),
        )

    ports = list(BASE_PORTS)
    for port in build_config.exposed_ports:
        if port not in ports:
            ports.append(port)

    return Requirements(
        cpu=cpu,
        memory=memory,
        storage=StorageRequirement(min="1GB", type="ssd"),
        network=NetworkRequirement(ports=tuple(ports), protocols=("http", "https")),
        services=detect_services(dependencies),
        constraints=(),
    )
