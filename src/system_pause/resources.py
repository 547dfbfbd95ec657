"""Reference managed resource wired to the pause controller."""

from __future__ import annotations

import logging
from typing import Dict, Tuple

from .events import EventBus
from .guard import ControllerGuard, when_not_paused
from .ledger import Ledger
from .types import Principal, normalize

logger = logging.getLogger(__name__)


class InsufficientBalance(ValueError):
    pass


class StakeVault:
    """Minimal stake manager whose deposits and withdrawals halt while paused."""

    def __init__(self, ledger: Ledger, bus: EventBus, *, name: str, address: Principal, controller: Principal) -> None:
        self.name = name
        self.address = normalize(address)
        self.guard = ControllerGuard(ledger, bus, controller, name=name)
        self._ledger = ledger
        self._bus = bus
        self._balances: Dict[Principal, int] = {}
        ledger.register(self)

    # Pausable -----------------------------------------------------------------

    def pause(self, caller: Principal) -> None:
        self.guard.pause(caller)

    def unpause(self, caller: Principal) -> None:
        self.guard.unpause(caller)

    def update_controller(self, caller: Principal, new_controller: Principal) -> None:
        self.guard.update_controller(caller, new_controller)

    def controller(self) -> Principal:
        return self.guard.controller()

    @property
    def paused(self) -> bool:
        return self.guard.paused

    # Business operations ------------------------------------------------------

    def balance_of(self, account: Principal) -> int:
        return self._balances.get(normalize(account), 0)

    @when_not_paused
    def deposit(self, caller: Principal, amount: int) -> int:
        if amount <= 0:
            raise ValueError("Deposit amount must be positive")
        key = normalize(caller)
        self._ledger.touch(self)
        self._balances[key] = self._balances.get(key, 0) + amount
        self._bus.emit("StakeDeposited", resource=self.name, account=key, amount=amount)
        return self._balances[key]

    @when_not_paused
    def withdraw(self, caller: Principal, amount: int) -> int:
        key = normalize(caller)
        balance = self._balances.get(key, 0)
        if amount <= 0 or amount > balance:
            raise InsufficientBalance(f"{key} cannot withdraw {amount} from {balance}")
        self._ledger.touch(self)
        self._balances[key] = balance - amount
        self._bus.emit("StakeWithdrawn", resource=self.name, account=key, amount=amount)
        return self._balances[key]

    def snapshot(self) -> Dict[Principal, int]:
        return dict(self._balances)

    def restore(self, state: Dict[Principal, int]) -> None:
        self._balances = dict(state)

    def __repr__(self) -> str:
        return f"StakeVault(name={self.name!r}, address={self.address!r})"


__all__ = ["InsufficientBalance", "StakeVault"]
