from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional

from ..domain.models import CostEstimate, CostItem, InfrastructureRecommendation, RepositoryAnalysis
from ..domain.units import format_mb, parse_size_mb, scale_size
from .analysis_summary import DEFAULT_STEP_SECONDS


PERFORMANCE_TIERS = ("basic", "standard", "performance", "enterprise")
MIN_MONTHLY_COST = 6
MIN_MEMORY_MB = 512


def _with_cost(infra: InfrastructureRecommendation, monthly: float) -> InfrastructureRecommendation:
    monthly = round(monthly, 2)
    cost = CostEstimate(
        monthly=monthly,
        currency=infra.estimated_cost.currency,
        breakdown=(CostItem("Droplet", monthly), CostItem("Bandwidth", 0)),
    )
    return replace(infra, estimated_cost=cost)


def adjust_for_tier(
    infra: InfrastructureRecommendation,
    tier: str,
    budget_limit: Optional[float] = None,
) -> InfrastructureRecommendation:
    """Resize an infrastructure recommendation for a performance tier, then cap it to a budget.

    ``standard`` leaves the recommendation untouched. When the adjusted
    monthly cost exceeds ``budget_limit``, CPU and memory shrink by the same
    ratio (never below 1 vCPU / 512MB) and the cost becomes the budget.
    """
    if tier not in PERFORMANCE_TIERS:
        raise ValueError(f"Unknown performance tier: {tier}")

    instance = infra.instance
    monthly = infra.estimated_cost.monthly
    scaling = infra.scaling

    if tier == "basic":
        instance = replace(instance, cpu=max(1, instance.cpu - 1), memory="1GB")
        monthly = max(MIN_MONTHLY_COST, monthly * 0.5)
    elif tier == "performance":
        instance = replace(instance, cpu=instance.cpu * 2, memory=scale_size(instance.memory, 2))
        monthly = monthly * 2
    elif tier == "enterprise":
        instance = replace(instance, cpu=instance.cpu * 4, memory=scale_size(instance.memory, 4))
        monthly = monthly * 4
        scaling = replace(scaling, max=10)

    if budget_limit is not None and monthly > budget_limit:
        ratio = budget_limit / monthly
        memory_mb = max(MIN_MEMORY_MB, math.floor(parse_size_mb(instance.memory) * ratio))
        instance = replace(
            instance,
            cpu=max(1, math.floor(instance.cpu * ratio)),
            memory=format_mb(memory_mb),
        )
        monthly = budget_limit

    return _with_cost(replace(infra, instance=instance, scaling=scaling), monthly)


def make_plan_id(now: datetime, suffix: str) -> str:
    return f"deploy-{int(now.timestamp() * 1000)}-{suffix}"


def build_deployment_plan(
    analysis: RepositoryAnalysis,
    *,
    plan_id: str,
    environment: str = "production",
    provider: str = "digitalocean",
    performance_tier: str = "standard",
    budget_limit: Optional[float] = None,
) -> dict[str, Any]:
    strategy = analysis.strategy
    infra = adjust_for_tier(strategy.infrastructure, performance_tier, budget_limit)
    steps = [
        {
            "order": step.order,
            "name": step.name,
            "description": step.description,
            "estimated_duration": step.timeout or DEFAULT_STEP_SECONDS,
        }
        for step in strategy.steps
    ]

    return {
        "id": plan_id,
        "repository": analysis.repository.url,
        "environment": environment,
        "performance_tier": performance_tier,
        "infrastructure": {
            "provider": provider,
            "instance": {
                "type": infra.instance.type,
                "cpu": infra.instance.cpu,
                "memory": infra.instance.memory,
                "storage": infra.instance.storage,
            },
            "scaling": {
                "min": infra.scaling.min,
                "max": infra.scaling.max,
                "target": infra.scaling.target,
                "threshold": infra.scaling.threshold,
            },
            "estimated_cost": {
                "monthly": infra.estimated_cost.monthly,
                "currency": infra.estimated_cost.currency,
                "breakdown": [
                    {"component": item.component, "cost": item.cost, "unit": item.unit}
                    for item in infra.estimated_cost.breakdown
                ],
            },
        },
        "deployment": {
            "strategy": strategy.type.value,
            "approach": strategy.approach.value,
            "steps": steps,
            "total_time": sum(s["estimated_duration"] for s in steps),
        },
        "security": {
            "https": strategy.security.https,
            "firewall_rules": [
                {"port": r.port, "protocol": r.protocol, "description": r.description}
                for r in strategy.security.firewall
            ],
            "required_secrets": list(strategy.security.secrets),
        },
        "monitoring": {
            "health_check": strategy.monitoring.health_check.endpoint,
            "metrics": list(strategy.monitoring.metrics),
            "log_retention": strategy.monitoring.logging.retention,
        },
        "rollback": {
            "type": strategy.rollback.type,
            "triggers": list(strategy.rollback.triggers),
            "timeout": strategy.rollback.timeout,
        },
    }
