from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from .ledger import Ledger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Event:
    type: str
    payload: Dict[str, Any]
    block: int
    timestamp: float


class EventBus:
    """Audit trail of notifications emitted by the controller and its targets.

    Events emitted inside an invocation that is later rolled back are erased,
    and subscribers only hear about events once the invocation commits.
    """

    def __init__(self, ledger: Ledger) -> None:
        self._ledger = ledger
        self._events: List[Event] = []
        self._subscribers: List[Callable[[Event], None]] = []
        ledger.register(self)

    def emit(self, event_type: str, **payload: Any) -> Event:
        event = Event(event_type, payload, self._ledger.block, time.time())
        self._ledger.touch(self)
        self._events.append(event)
        logger.debug("Event staged", extra={"event": event_type, "data": payload})
        self._ledger.defer(lambda: self._deliver(event))
        return event

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        self._subscribers.append(callback)

    def events(self) -> Iterable[Event]:
        return iter(list(self._events))

    def find(self, event_type: str) -> Iterable[Event]:
        for event in list(self._events):
            if event.type == event_type:
                yield event

    def latest(self, event_type: str) -> Optional[Event]:
        for event in reversed(self._events):
            if event.type == event_type:
                return event
        return None

    def snapshot(self) -> int:
        return len(self._events)

    def restore(self, state: int) -> None:
        del self._events[state:]

    def _deliver(self, event: Event) -> None:
        logger.info(event.type, extra={"event": event.type, "data": event.payload})
        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception:
                logger.exception(
                    "Event subscriber failed",
                    extra={"event": "subscriber_failed", "data": {"type": event.type, "block": event.block}},
                )


__all__ = ["Event", "EventBus"]
