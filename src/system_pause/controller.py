"""Emergency pause controller.

The controller owns the access roles and the target registry, and fans
commands out to every registered resource through the :class:`Pausable`
interface. Pause and unpause broadcasts are best effort: one target rejecting
the call (typically because it is already in the requested state) never stops
the rest. Migration is all or nothing: the first target failure aborts the
invocation and the ledger restores every target it had already touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Set

from .errors import InvalidPrincipal, TargetCallFailure
from .events import EventBus
from .interface import Pausable, describe_target
from .ledger import Ledger
from .metrics import PauseMetrics
from .registry import TargetRegistry
from .roles import AccessRoles
from .types import Principal, is_null, normalize, same_principal

logger = logging.getLogger(__name__)


@dataclass
class BroadcastReport:
    """Outcome of a best-effort broadcast, for operators and tests."""

    operation: str
    caller: Principal
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class SystemPauseController:
    def __init__(
        self,
        ledger: Ledger,
        bus: EventBus,
        *,
        address: Principal,
        owner: Principal,
        pausers: Iterable[Principal] = (),
        metrics: Optional[PauseMetrics] = None,
    ) -> None:
        if is_null(address):
            raise InvalidPrincipal(address)
        self.address = normalize(address)
        self.ledger = ledger
        self.bus = bus
        self.metrics = metrics
        self.roles = AccessRoles(ledger, bus, owner, pausers)
        self.registry = TargetRegistry(ledger, bus)
        self._sync_registry_metric()

    # -- Roles ---------------------------------------------------------------

    @property
    def owner(self) -> Principal:
        return self.roles.owner

    def is_pauser(self, principal: Principal) -> bool:
        return self.roles.is_pauser(principal)

    def set_pauser(self, caller: Principal, principal: Principal, can_pause: bool) -> None:
        with self.ledger.atomic():
            self.roles.set_pauser(caller, principal, can_pause)

    def transfer_ownership(self, caller: Principal, new_owner: Principal) -> None:
        with self.ledger.atomic():
            self.roles.transfer_ownership(caller, new_owner)

    # -- Registry ------------------------------------------------------------

    def add_targets(self, caller: Principal, targets: Iterable[Optional[Pausable]]) -> List[Pausable]:
        with self.ledger.atomic():
            self.roles.require_owner(caller)
            added = self.registry.add(targets)
            self.ledger.defer(self._sync_registry_metric)
            return added

    def remove_targets(self, caller: Principal, targets: Iterable[Optional[Pausable]]) -> List[Pausable]:
        with self.ledger.atomic():
            self.roles.require_owner(caller)
            removed = self.registry.remove(targets)
            self.ledger.defer(self._sync_registry_metric)
            return removed

    def list_targets(self) -> Set[Pausable]:
        return self.registry.as_set()

    # -- Broadcasts ----------------------------------------------------------

    def pause_all(self, caller: Principal) -> BroadcastReport:
        with self.ledger.atomic():
            self.roles.require_pauser(caller)
            report = self._broadcast("pause_all", caller, lambda target: target.pause(self.address))
            self.bus.emit("PauseTriggered", caller=normalize(caller))
            return report

    def unpause_all(self, caller: Principal) -> BroadcastReport:
        with self.ledger.atomic():
            self.roles.require_owner(caller)
            report = self._broadcast("unpause_all", caller, lambda target: target.unpause(self.address))
            self.bus.emit("UnpauseTriggered")
            return report

    def migrate_all(self, caller: Principal, new_controller: Principal) -> None:
        """Re-point every registered target at ``new_controller``.

        ``new_controller`` is deliberately not validated: passing the null
        address burns pausability for every target in one call.
        """

        with self.ledger.atomic():
            self.roles.require_owner(caller)
            targets = self.registry.snapshot_targets()
            for target in targets:
                if not same_principal(target.controller(), self.address):
                    raise TargetCallFailure(
                        describe_target(target), "update_controller", "target is controlled elsewhere"
                    )
            for target in targets:
                try:
                    target.update_controller(self.address, new_controller)
                except Exception as exc:
                    logger.error(
                        "Migration aborted",
                        extra={
                            "event": "migration_aborted",
                            "data": {"target": describe_target(target), "error": type(exc).__name__},
                        },
                    )
                    raise TargetCallFailure(describe_target(target), "update_controller", str(exc)) from exc
            self.bus.emit("MigrationTriggered", new_controller=normalize(new_controller))
            self.ledger.defer(lambda: self._record_broadcast("migrate_all", 0))

    # -- Internal helpers ----------------------------------------------------

    def _broadcast(
        self, operation: str, caller: Principal, call: Callable[[Pausable], None]
    ) -> BroadcastReport:
        report = BroadcastReport(operation=operation, caller=normalize(caller))
        for target in self.registry.snapshot_targets():
            name = describe_target(target)
            try:
                with self.ledger.atomic():
                    call(target)
            except Exception as exc:
                # Contained: the remaining targets must still be reached.
                logger.warning(
                    "Target rejected broadcast",
                    extra={"event": operation, "data": {"target": name, "error": type(exc).__name__}},
                )
                report.failed.append(name)
                continue
            report.succeeded.append(name)
        self.ledger.defer(lambda: self._record_broadcast(operation, len(report.failed)))
        return report

    def _record_broadcast(self, operation: str, failures: int) -> None:
        if self.metrics is not None:
            self.metrics.record_broadcast(operation, failures)

    def _sync_registry_metric(self) -> None:
        if self.metrics is not None:
            self.metrics.set_registered_targets(len(self.registry))


__all__ = ["BroadcastReport", "SystemPauseController"]
