from __future__ import annotations

from typing import Any, Mapping, Optional

from ..domain.models import RepositoryAnalysis
from ..domain.units import parse_size_mb
from .analysis_summary import requirements_to_dict
from .instance_catalog import lookup_instance


WARN_EXTERNAL_SERVICES = "External services detected - ensure they are configured"
WARN_SSL_WITHOUT_DOMAIN = "SSL enabled but no domain specified"


def _check(check: str, status: str, message: str) -> dict[str, str]:
    return {"check": check, "status": status, "message": message}


def validate_deployment(
    analysis: RepositoryAnalysis,
    *,
    instance_type: str,
    domain: Optional[str] = None,
    ssl: bool = True,
    environment_variables: Optional[Mapping[str, str]] = None,
) -> dict[str, Any]:
    """Check a proposed deployment configuration against the analyzed requirements.

    A configuration is valid when no check fails; warnings never invalidate it.
    """
    requirements = analysis.requirements
    validations: list[dict[str, str]] = []
    warnings: list[str] = []

    offer = lookup_instance(instance_type)
    if offer is None:
        validations.append(_check(
            "cpu_requirements", "warning",
            f"Unknown instance type '{instance_type}' - CPU requirements not verified",
        ))
        validations.append(_check(
            "memory_requirements", "warning",
            f"Unknown instance type '{instance_type}' - memory requirements not verified",
        ))
    else:
        if offer.cpu >= requirements.cpu.min:
            validations.append(_check(
                "cpu_requirements", "pass",
                f"CPU requirements validated ({offer.cpu} vCPU >= {requirements.cpu.min})",
            ))
        else:
            validations.append(_check(
                "cpu_requirements", "fail",
                f"{offer.type} provides {offer.cpu} vCPU, at least {requirements.cpu.min} required",
            ))
        if parse_size_mb(offer.memory) >= parse_size_mb(requirements.memory.min):
            validations.append(_check(
                "memory_requirements", "pass",
                f"Memory requirements validated ({offer.memory} >= {requirements.memory.min})",
            ))
        else:
            validations.append(_check(
                "memory_requirements", "fail",
                f"{offer.type} provides {offer.memory}, at least {requirements.memory.min} required",
            ))

    provided = environment_variables or {}
    missing = [
        v.name for v in analysis.build_config.environment_variables
        if v.required and not v.default_value and v.name not in provided
    ]
    if missing:
        validations.append(_check(
            "environment_variables", "fail",
            f"Missing required environment variables: {', '.join(missing)}",
        ))
    else:
        validations.append(_check(
            "environment_variables", "pass", "All required environment variables provided",
        ))

    if requirements.services:
        warnings.append(WARN_EXTERNAL_SERVICES)
    if ssl and not domain:
        warnings.append(WARN_SSL_WITHOUT_DOMAIN)

    return {
        "valid": not any(v["status"] == "fail" for v in validations),
        "validations": validations,
        "warnings": warnings,
        "requirements": requirements_to_dict(requirements),
    }
