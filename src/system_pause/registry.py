"""Duplicate-free registry of managed resources."""

from __future__ import annotations

from typing import Dict, Iterable, List, Set

from .errors import InvalidTarget
from .events import EventBus
from .interface import Pausable, describe_target
from .ledger import Ledger


class TargetRegistry:
    def __init__(self, ledger: Ledger, bus: EventBus) -> None:
        self._ledger = ledger
        self._bus = bus
        # Dict keys double as an insertion-ordered set.
        self._targets: Dict[Pausable, None] = {}
        ledger.register(self)

    def __contains__(self, target: object) -> bool:
        return target in self._targets

    def __len__(self) -> int:
        return len(self._targets)

    def add(self, targets: Iterable[Pausable | None]) -> List[Pausable]:
        """Insert every target not yet present and return the newly added ones.

        The batch is validated before anything is inserted. Targets must keep
        their state on this registry's ledger so a failed migration can be
        rolled back across all of them.
        """

        batch = list(targets)
        for target in batch:
            if target is None or not isinstance(target, Pausable) or not self._ledger.hosts(target):
                raise InvalidTarget(target)
        added: List[Pausable] = []
        for target in batch:
            if target in self._targets:
                continue
            self._ledger.touch(self)
            self._targets[target] = None
            added.append(target)
            self._bus.emit("TargetAdded", target=describe_target(target))
        return added

    def remove(self, targets: Iterable[Pausable | None]) -> List[Pausable]:
        removed: List[Pausable] = []
        for target in targets:
            if target is None or target not in self._targets:
                continue
            self._ledger.touch(self)
            del self._targets[target]
            removed.append(target)
            self._bus.emit("TargetRemoved", target=describe_target(target))
        return removed

    def snapshot_targets(self) -> List[Pausable]:
        return list(self._targets)

    def as_set(self) -> Set[Pausable]:
        return set(self._targets)

    def snapshot(self) -> Dict[Pausable, None]:
        return dict(self._targets)

    def restore(self, state: Dict[Pausable, None]) -> None:
        self._targets = dict(state)


__all__ = ["TargetRegistry"]
