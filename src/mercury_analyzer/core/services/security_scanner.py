from __future__ import annotations

from datetime import datetime
from typing import Any

from ..domain.models import RepositoryAnalysis, Severity
from .advisories import has_unset_secrets


SECURITY_RECOMMENDATIONS = (
    "Enable HTTPS/SSL encryption",
    "Implement proper secret management",
    "Configure firewall rules",
    "Set up automated security updates",
    "Enable access logging and monitoring",
)


def _finding(id: str, severity: Severity, title: str, component: str, recommendation: str) -> dict[str, Any]:
    return {
        "id": id,
        "severity": severity.value,
        "title": title,
        "component": component,
        "recommendation": recommendation,
    }


def collect_findings(analysis: RepositoryAnalysis, *, include_dependencies: bool = True) -> list[dict[str, Any]]:
    findings: list[dict[str, Any]] = []
    if not analysis.build_config.has_dockerfile:
        findings.append(_finding(
            "SEC-001", Severity.LOW, "No Dockerfile found", "build_configuration",
            "Use containerization for consistent, secure deployments",
        ))
    if has_unset_secrets(analysis.build_config):
        findings.append(_finding(
            "SEC-002", Severity.HIGH, "Sensitive environment variables without defaults", "configuration",
            "Ensure all sensitive environment variables are properly managed",
        ))
    if not analysis.strategy.security.https:
        findings.append(_finding(
            "SEC-003", Severity.CRITICAL, "HTTPS not configured", "network_security",
            "Enable HTTPS with SSL/TLS certificates",
        ))
    if include_dependencies:
        for dep in analysis.dependencies:
            for vuln in dep.vulnerabilities:
                fix = f"Upgrade {dep.name} to {vuln.fixed_in}" if vuln.fixed_in else f"Review usage of {dep.name}"
                findings.append(_finding(vuln.id, vuln.severity, vuln.title, f"dependency:{dep.name}", fix))
    return findings


def scan_security(
    analysis: RepositoryAnalysis,
    *,
    scan_date: datetime,
    include_dependencies: bool = True,
    severity_threshold: Severity = Severity.MODERATE,
) -> dict[str, Any]:
    """Static configuration findings at or above ``severity_threshold``."""
    threshold = Severity(severity_threshold)
    findings = [
        f for f in collect_findings(analysis, include_dependencies=include_dependencies)
        if Severity(f["severity"]).rank >= threshold.rank
    ]

    by_severity: dict[str, int] = {}
    for f in findings:
        by_severity[f["severity"]] = by_severity.get(f["severity"], 0) + 1

    return {
        "security_report": {
            "repository": analysis.repository.url,
            "scan_date": scan_date.isoformat(),
            "severity_threshold": threshold.value,
            "vulnerabilities": findings,
            "summary": {
                "total": len(findings),
                "by_severity": by_severity,
                "critical_count": by_severity.get(Severity.CRITICAL.value, 0),
            },
            "recommendations": list(SECURITY_RECOMMENDATIONS),
        }
    }
