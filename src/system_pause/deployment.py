"""Wire a controller and its managed resources from configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from .config import SystemPauseConfig
from .controller import SystemPauseController
from .events import EventBus
from .ledger import Ledger
from .metrics import PauseMetrics
from .resources import StakeVault
from .types import Principal, normalize

logger = logging.getLogger(__name__)


@dataclass
class Deployment:
    ledger: Ledger
    bus: EventBus
    controller: SystemPauseController
    resources: Dict[str, StakeVault] = field(default_factory=dict)

    def resolve(self, reference: str) -> StakeVault:
        """Look a resource up by name or address."""

        if reference in self.resources:
            return self.resources[reference]
        wanted = normalize(reference)
        for resource in self.resources.values():
            if resource.address == wanted:
                return resource
        raise KeyError(reference)

    def resolve_principal(self, reference: str) -> Principal:
        """Translate a resource name into its address; other values pass through."""

        if reference in self.resources:
            return self.resources[reference].address
        return reference


def deploy(
    config: SystemPauseConfig,
    *,
    ledger: Optional[Ledger] = None,
    bus: Optional[EventBus] = None,
    metrics: Optional[PauseMetrics] = None,
) -> Deployment:
    ledger = ledger or Ledger()
    bus = bus or EventBus(ledger)
    controller = SystemPauseController(
        ledger,
        bus,
        address=config.controller_address,
        owner=config.owner,
        pausers=config.pausers,
        metrics=metrics,
    )
    resources = {
        resource.name: StakeVault(
            ledger,
            bus,
            name=resource.name,
            address=resource.address,
            controller=resource.controller or config.controller_address,
        )
        for resource in config.resources
    }
    if config.register_resources and resources:
        controller.add_targets(config.owner, resources.values())
    logger.info(
        "SystemPause deployed",
        extra={
            "event": "deployed",
            "data": {"controller": controller.address, "owner": controller.owner, "resources": sorted(resources)},
        },
    )
    return Deployment(ledger=ledger, bus=bus, controller=controller, resources=resources)


__all__ = ["Deployment", "deploy"]
