"""Resource-side half of the pause contract.

A managed resource embeds a :class:`ControllerGuard` instead of inheriting
from a pausable base class. The guard records exactly one controller and a
paused flag. Controller-only operations are gated on caller identity, and
business operations decorated with :func:`when_not_paused` are refused while
the flag is set.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Tuple, TypeVar

from .errors import AlreadyActive, AlreadyPaused, ResourcePaused, Unauthorized
from .events import EventBus
from .ledger import Ledger
from .types import Principal, is_null, normalize, same_principal

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class ControllerGuard:
    def __init__(self, ledger: Ledger, bus: EventBus, controller: Principal, *, name: str) -> None:
        self.ledger = ledger
        self.bus = bus
        self.name = name
        self._controller = normalize(controller)
        self._paused = False
        ledger.register(self)

    def controller(self) -> Principal:
        return self._controller

    @property
    def paused(self) -> bool:
        return self._paused

    def only_controller(self, caller: Principal) -> None:
        # A burned (null) controller can never be matched.
        if is_null(caller) or not same_principal(caller, self._controller):
            logger.error(
                "Rejected controller-only call",
                extra={"event": "guard_unauthorized", "data": {"resource": self.name, "caller": caller}},
            )
            raise Unauthorized(caller, f"controller of {self.name}")

    def require_active(self) -> None:
        if self._paused:
            raise ResourcePaused(self.name)

    def pause(self, caller: Principal) -> None:
        with self.ledger.atomic():
            self.only_controller(caller)
            if self._paused:
                raise AlreadyPaused(self.name)
            self.ledger.touch(self)
            self._paused = True
            self.bus.emit("Paused", resource=self.name, caller=normalize(caller))

    def unpause(self, caller: Principal) -> None:
        with self.ledger.atomic():
            self.only_controller(caller)
            if not self._paused:
                raise AlreadyActive(self.name)
            self.ledger.touch(self)
            self._paused = False
            self.bus.emit("Unpaused", resource=self.name, caller=normalize(caller))

    def update_controller(self, caller: Principal, new_controller: Principal) -> None:
        with self.ledger.atomic():
            self.only_controller(caller)
            self.ledger.touch(self)
            previous = self._controller
            self._controller = normalize(new_controller)
            self.bus.emit(
                "ControllerUpdated",
                resource=self.name,
                previous=previous,
                controller=self._controller,
            )

    def snapshot(self) -> Tuple[Principal, bool]:
        return self._controller, self._paused

    def restore(self, state: Tuple[Principal, bool]) -> None:
        self._controller, self._paused = state


def when_not_paused(method: F) -> F:
    """Run a resource method atomically, refusing it while the resource is paused.

    The decorated object must expose its :class:`ControllerGuard` as ``guard``.
    """

    @functools.wraps(method)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        guard: ControllerGuard = self.guard
        with guard.ledger.atomic():
            guard.require_active()
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


__all__ = ["ControllerGuard", "when_not_paused"]
