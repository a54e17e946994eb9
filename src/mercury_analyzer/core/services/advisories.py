"""Confidence score, warnings and recommendations for an analysis."""

from __future__ import annotations

from ..domain.models import BuildConfig, Dependency, TechStack


CONFIDENCE_BASE = 50
CONFIDENCE_CAP = 95

WARN_UNKNOWN_STACK = "Could not determine primary technology stack"
WARN_NO_ENTRYPOINT = "No Dockerfile or start script found - may require manual configuration"
WARN_NO_DEPENDENCIES = "No dependencies detected - analysis may be incomplete"
WARN_SENSITIVE_WITHOUT_DEFAULT = "Sensitive environment variables detected without defaults"

REC_DOCKERFILE = "Consider adding a Dockerfile for consistent deployments"
REC_PM2 = "Consider using PM2 for Node.js process management"
REC_TESTS = "Add automated tests to improve deployment confidence"
ALWAYS_RECOMMENDED = (
    "Set up SSL/TLS certificate for HTTPS encryption",
    "Configure automated backups for data protection",
    "Implement monitoring and alerting for production readiness",
)


def has_unset_secrets(build_config: BuildConfig) -> bool:
    return any(v.sensitive and not v.default_value for v in build_config.environment_variables)


def calculate_confidence(
    stack: TechStack,
    dependencies: tuple[Dependency, ...],
    build_config: BuildConfig,
) -> int:
    confidence = CONFIDENCE_BASE
    if stack.is_known:
        confidence += 20
    if stack.framework:
        confidence += 15
    if build_config.has_dockerfile:
        confidence += 15
    if build_config.start_script:
        confidence += 10
    if dependencies:
        confidence += 10
    return min(confidence, CONFIDENCE_CAP)


def generate_warnings(
    stack: TechStack,
    dependencies: tuple[Dependency, ...],
    build_config: BuildConfig,
) -> tuple[str, ...]:
    warnings: list[str] = []
    if not stack.is_known:
        warnings.append(WARN_UNKNOWN_STACK)
    if not build_config.has_dockerfile and not build_config.start_script:
        warnings.append(WARN_NO_ENTRYPOINT)
    if not dependencies:
        warnings.append(WARN_NO_DEPENDENCIES)
    if has_unset_secrets(build_config):
        warnings.append(WARN_SENSITIVE_WITHOUT_DEFAULT)
    return tuple(warnings)


def generate_recommendations(
    stack: TechStack,
    dependencies: tuple[Dependency, ...],
    build_config: BuildConfig,
) -> tuple[str, ...]:
    recommendations: list[str] = []
    if not build_config.has_dockerfile:
        recommendations.append(REC_DOCKERFILE)
    if stack.runtime == "nodejs" and not any(d.name == "pm2" for d in dependencies):
        recommendations.append(REC_PM2)
    if not build_config.test_script:
        recommendations.append(REC_TESTS)
    recommendations.extend(ALWAYS_RECOMMENDED)
    return tuple(recommendations)
