"""Known instance offerings used for sizing, validation and cost lookups."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class InstanceOffer:
    provider: str
    type: str
    cpu: int
    memory: str
    monthly: float


CATALOG = (
    InstanceOffer("digitalocean", "s-1vcpu-1gb", 1, "1GB", 6),
    InstanceOffer("digitalocean", "s-1vcpu-2gb", 1, "2GB", 12),
    InstanceOffer("digitalocean", "s-2vcpu-2gb", 2, "2GB", 18),
    InstanceOffer("digitalocean", "s-2vcpu-4gb", 2, "4GB", 24),
    InstanceOffer("digitalocean", "s-4vcpu-8gb", 4, "8GB", 48),
    InstanceOffer("digitalocean", "basic-1vcpu-2gb", 1, "2GB", 24),
    InstanceOffer("digitalocean", "basic-2vcpu-4gb", 2, "4GB", 48),
    InstanceOffer("digitalocean", "basic-4vcpu-8gb", 4, "8GB", 96),
)

_BY_TYPE = {offer.type: offer for offer in CATALOG}


def lookup_instance(instance_type: str) -> Optional[InstanceOffer]:
    return _BY_TYPE.get(instance_type.strip().lower())
