from __future__ import annotations

from typing import Any, Optional

from ..domain.models import RepositoryAnalysis
from .instance_catalog import lookup_instance


# share of the monthly bill attributed to each component
COST_BREAKDOWN = (("Compute Instance", 0.8), ("Storage", 0.1), ("Bandwidth", 0.1))
CLOUD_COST_MULTIPLIER = 3
SAVINGS_PERCENTAGE = 67


def estimate_cost(
    analysis: RepositoryAnalysis,
    *,
    provider: str = "digitalocean",
    instance_type: Optional[str] = None,
    duration_months: int = 1,
) -> dict[str, Any]:
    """Project the monthly cost of the recommended (or given) instance over a period.

    An explicit ``instance_type`` found in the catalog replaces the
    recommended instance's price; unknown types fall back to it.
    """
    infra = analysis.strategy.infrastructure
    offer = lookup_instance(instance_type) if instance_type else None
    resolved_type = offer.type if offer else infra.instance.type
    base = float(offer.monthly if offer else infra.estimated_cost.monthly)
    total = round(base * duration_months, 2)

    return {
        "cost_estimate": {
            "base_monthly": base,
            "duration_months": duration_months,
            "total_cost": total,
            "currency": infra.estimated_cost.currency,
            "instance_type": resolved_type,
            "breakdown": [
                {"component": component, "cost": round(base * share, 2), "percentage": int(share * 100)}
                for component, share in COST_BREAKDOWN
            ],
            "provider": provider,
        },
        "savings_vs_cloud": {
            "estimated_cloud_cost": round(total * CLOUD_COST_MULTIPLIER, 2),
            "savings_amount": round(total * (CLOUD_COST_MULTIPLIER - 1), 2),
            "savings_percentage": SAVINGS_PERCENTAGE,
        },
    }
