"""Two-tier access roles: a single transferable owner and a set of pausers."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Tuple

from .errors import InvalidPrincipal, Unauthorized
from .events import EventBus
from .ledger import Ledger
from .types import Principal, is_null, normalize, same_principal

logger = logging.getLogger(__name__)


class AccessRoles:
    """Owner and pauser bookkeeping.

    The owner is always treated as a pauser regardless of the stored flags.
    Mutations must run inside an invocation opened by the caller.
    """

    def __init__(self, ledger: Ledger, bus: EventBus, owner: Principal, pausers: Iterable[Principal] = ()) -> None:
        if is_null(owner):
            raise InvalidPrincipal(owner)
        self._ledger = ledger
        self._bus = bus
        self._owner = normalize(owner)
        self._pausers: Dict[Principal, bool] = {}
        for pauser in pausers:
            if is_null(pauser):
                raise InvalidPrincipal(pauser)
            self._pausers[normalize(pauser)] = True
        ledger.register(self)

    @property
    def owner(self) -> Principal:
        return self._owner

    def is_owner(self, principal: Principal) -> bool:
        return same_principal(principal, self._owner)

    def is_pauser(self, principal: Principal) -> bool:
        if self.is_owner(principal):
            return True
        return self._pausers.get(normalize(principal), False)

    def pausers(self) -> List[Principal]:
        """Principals holding an explicit pauser flag (the owner is implicit)."""

        return [principal for principal, allowed in self._pausers.items() if allowed]

    def require_owner(self, caller: Principal) -> None:
        if not self.is_owner(caller):
            logger.error("Owner check failed", extra={"event": "unauthorized", "data": {"caller": caller}})
            raise Unauthorized(caller, "owner")

    def require_pauser(self, caller: Principal) -> None:
        if not self.is_pauser(caller):
            logger.error("Pauser check failed", extra={"event": "unauthorized", "data": {"caller": caller}})
            raise Unauthorized(caller, "pauser")

    def set_pauser(self, caller: Principal, principal: Principal, can_pause: bool) -> None:
        self.require_owner(caller)
        if is_null(principal):
            raise InvalidPrincipal(principal)
        key = normalize(principal)
        self._ledger.touch(self)
        if can_pause:
            self._pausers[key] = True
        else:
            self._pausers.pop(key, None)
        self._bus.emit("PauserUpdated", pauser=key, allowed=bool(can_pause))

    def transfer_ownership(self, caller: Principal, new_owner: Principal) -> None:
        self.require_owner(caller)
        if is_null(new_owner):
            raise InvalidPrincipal(new_owner)
        self._ledger.touch(self)
        previous = self._owner
        self._owner = normalize(new_owner)
        self._bus.emit("OwnershipTransferred", previous_owner=previous, new_owner=self._owner)

    def snapshot(self) -> Tuple[Principal, Dict[Principal, bool]]:
        return self._owner, dict(self._pausers)

    def restore(self, state: Tuple[Principal, Dict[Principal, bool]]) -> None:
        self._owner, pausers = state
        self._pausers = dict(pausers)


__all__ = ["AccessRoles"]
