from __future__ import annotations

from typing import Any, Iterable

from ..domain.models import (
    DeploymentStep,
    RepositoryAnalysis,
    Requirements,
    ServiceType,
    StackPrimary,
)


DEFAULT_STEP_SECONDS = 60


def calculate_complexity(analysis: RepositoryAnalysis) -> str:
    """Rate deployment complexity as simple, moderate or complex."""
    score = 0
    build = analysis.build_config
    if len(analysis.dependencies) > 20:
        score += 1
    if analysis.requirements.services:
        score += 1
    if not build.has_dockerfile and not build.start_script:
        score += 1
    if analysis.tech_stack.primary is StackPrimary.UNKNOWN:
        score += 2
    if len(build.environment_variables) > 5:
        score += 1

    if score >= 4:
        return "complex"
    if score >= 2:
        return "moderate"
    return "simple"


def estimate_deployment_time(steps: Iterable[DeploymentStep]) -> int:
    """Total seconds across all steps; steps without a timeout count as 60s."""
    return sum(step.timeout or DEFAULT_STEP_SECONDS for step in steps)


def requirements_to_dict(requirements: Requirements) -> dict[str, Any]:
    return {
        "cpu": {"min": requirements.cpu.min, "recommended": requirements.cpu.recommended},
        "memory": {"min": requirements.memory.min, "recommended": requirements.memory.recommended},
        "storage": {"min": requirements.storage.min, "type": requirements.storage.type},
        "ports": list(requirements.network.ports),
        "protocols": list(requirements.network.protocols),
        "services": [
            {"name": s.name, "type": s.type.value, "required": s.required}
            for s in requirements.services
        ],
    }


def summarize_analysis(analysis: RepositoryAnalysis) -> dict[str, Any]:
    """Flatten an analysis into the record returned by the analyze tool."""
    repo = analysis.repository
    stack = analysis.tech_stack
    build = analysis.build_config
    strategy = analysis.strategy
    dockerfile = build.dockerfile

    return {
        "repository": {
            "id": repo.id,
            "url": repo.url,
            "name": repo.name,
            "branch": repo.branch,
            "snapshot_time": repo.snapshot_time.isoformat(),
            "expiry_time": repo.expiry_time.isoformat(),
        },
        "tech_stack": {
            "primary": stack.primary.value,
            "language": stack.language,
            "framework": stack.framework,
            "runtime": stack.runtime or stack.language,
            "package_manager": stack.package_manager,
            "build_tool": stack.build_tool,
            "secondary": list(stack.secondary),
            "testing": list(stack.testing),
            "database": [
                s.name for s in analysis.requirements.services if s.type is ServiceType.DATABASE
            ],
        },
        "dependencies": [
            {
                "name": d.name,
                "version": d.version,
                "type": d.type.value,
                "vulnerabilities": len(d.vulnerabilities),
            }
            for d in analysis.dependencies
        ],
        "build_configuration": {
            "has_dockerfile": build.has_dockerfile,
            "dockerfile": None if dockerfile is None else {
                "base_image": dockerfile.base_image,
                "exposed_ports": list(dockerfile.exposed_ports),
                "workdir": dockerfile.workdir,
                "multi_stage": dockerfile.multi_stage,
                "healthcheck": dockerfile.healthcheck,
                "entrypoint": dockerfile.entrypoint,
                "cmd": dockerfile.cmd,
            },
            "build_script": build.build_script,
            "start_script": build.start_script,
            "test_script": build.test_script,
            "environment_variables": [v.name for v in build.environment_variables],
        },
        "deployment_strategy": {
            "type": strategy.type.value,
            "approach": strategy.approach.value,
            "complexity": calculate_complexity(analysis),
            "estimated_deployment_time": estimate_deployment_time(strategy.steps),
        },
        "requirements": requirements_to_dict(analysis.requirements),
        "confidence": analysis.confidence,
        "warnings": list(analysis.warnings),
        "recommendations": list(analysis.recommendations),
        "analyzed_at": analysis.analyzed_at.isoformat(),
    }
