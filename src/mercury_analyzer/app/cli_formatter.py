"""CLI output formatting utilities for human-readable display."""

from __future__ import annotations

from typing import Any

from ..core.domain.models import RepositoryAnalysis
from ..core.services.analysis_summary import calculate_complexity, estimate_deployment_time


def format_analysis(analysis: RepositoryAnalysis) -> str:
    """Format an analysis for human-readable CLI output."""
    stack = analysis.tech_stack
    build = analysis.build_config
    req = analysis.requirements
    strategy = analysis.strategy

    lines = []
    lines.append("=" * 80)
    lines.append("REPOSITORY ANALYSIS")
    lines.append("=" * 80)
    lines.append(f"\nRepository: {analysis.repository.name} ({analysis.repository.url})")
    lines.append(f"Confidence: {analysis.confidence}%")

    lines.append("\n" + "-" * 80)
    lines.append("TECH STACK")
    lines.append("-" * 80)
    lines.append(f"Primary:         {stack.primary.value}")
    lines.append(f"Language:        {stack.language}")
    lines.append(f"Framework:       {stack.framework or '-'}")
    lines.append(f"Runtime:         {stack.runtime or '-'}")
    lines.append(f"Package manager: {stack.package_manager or '-'}")
    if stack.build_tool:
        lines.append(f"Build tool:      {stack.build_tool}")
    if stack.testing:
        lines.append(f"Testing:         {', '.join(stack.testing)}")
    lines.append(f"Dependencies:    {len(analysis.dependencies)}")

    lines.append("\n" + "-" * 80)
    lines.append("BUILD")
    lines.append("-" * 80)
    lines.append(f"Dockerfile:      {'yes' if build.has_dockerfile else 'no'}")
    if build.dockerfile and build.dockerfile.base_image:
        lines.append(f"Base image:      {build.dockerfile.base_image}")
    if build.start_script:
        lines.append(f"Start script:    {build.start_script}")
    if build.environment_variables:
        names = ", ".join(
            f"{v.name}*" if v.sensitive else v.name for v in build.environment_variables
        )
        lines.append(f"Environment:     {names}")

    lines.append("\n" + "-" * 80)
    lines.append("REQUIREMENTS")
    lines.append("-" * 80)
    lines.append(f"CPU:             {req.cpu.min} (recommended {req.cpu.recommended})")
    lines.append(f"Memory:          {req.memory.min} (recommended {req.memory.recommended})")
    lines.append(f"Ports:           {', '.join(str(p) for p in req.network.ports)}")
    if req.services:
        services = ", ".join(f"{s.name} ({s.type.value})" for s in req.services)
        lines.append(f"Services:        {services}")

    lines.append("\n" + "-" * 80)
    lines.append("DEPLOYMENT STRATEGY")
    lines.append("-" * 80)
    lines.append(
        f"{strategy.type.value} / {strategy.approach.value} - "
        f"{calculate_complexity(analysis)}, ~{estimate_deployment_time(strategy.steps)}s"
    )
    for step in strategy.steps:
        lines.append(f"  {step.order}. {step.name} - {step.description}")
    infra = strategy.infrastructure
    lines.append(
        f"\nInstance: {infra.instance.type} ({infra.provider}), "
        f"{infra.estimated_cost.monthly:g} {infra.estimated_cost.currency}/month"
    )

    if analysis.warnings:
        lines.append("\nWarnings:")
        for w in analysis.warnings:
            lines.append(f"  ! {w}")

    if analysis.recommendations:
        lines.append("\nRecommendations:")
        for i, r in enumerate(analysis.recommendations, 1):
            lines.append(f"  {i}. {r}")

    lines.append("\n" + "=" * 80)
    return "\n".join(lines)


def format_tool_result(result: dict[str, Any]) -> str:
    """Format a tool envelope as an indented key/value tree."""
    if not result.get("success"):
        return f"Error ({result.get('tool_name')}): {result.get('error')}"

    body = {k: v for k, v in result.items() if k not in ("success", "tool_name", "execution_time")}
    lines = [f"{result.get('tool_name')} ({result.get('execution_time')})"]
    _render(body, lines, indent=1)
    return "\n".join(lines)


def _render(value: Any, lines: list[str], indent: int) -> None:
    pad = "  " * indent
    if isinstance(value, dict):
        for key, item in value.items():
            if isinstance(item, (dict, list)) and item:
                lines.append(f"{pad}{key}:")
                _render(item, lines, indent + 1)
            else:
                lines.append(f"{pad}{key}: {_scalar(item)}")
    elif isinstance(value, list):
        for item in value:
            if isinstance(item, dict):
                lines.append(f"{pad}-")
                _render(item, lines, indent + 1)
            else:
                lines.append(f"{pad}- {_scalar(item)}")


def _scalar(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, (dict, list)):
        return "(none)"
    return str(value)


def format_tool_list(tools: list[tuple[str, str]]) -> str:
    lines = [f"Found {len(tools)} tools:", ""]
    for name, description in tools:
        lines.append(f"  {name:<36} {description}")
    return "\n".join(lines)
