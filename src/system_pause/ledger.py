"""In-process execution environment hosting the controller and its targets.

Every public operation on the controller or on a managed resource runs inside
:meth:`Ledger.atomic`. The ledger serializes those invocations behind a single
re-entrant lock and gives each level a savepoint: when a block raises, every
participant it touched is restored to the state it had when the block began.
A failure that escapes the outermost block therefore leaves no trace, while a
failure caught by an enclosing block only rolls back the nested call.

Participants call :meth:`Ledger.touch` before mutating their state. Only
touched participants are checkpointed, once per open savepoint.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Protocol, Set, Tuple

logger = logging.getLogger(__name__)


class Journaled(Protocol):
    """State holder that can be checkpointed by the ledger."""

    def snapshot(self) -> Any:
        ...

    def restore(self, state: Any) -> None:
        ...


@dataclass
class _Savepoint:
    deferred: int
    states: Dict[int, Tuple[Journaled, Any]] = field(default_factory=dict)


class Ledger:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._participants: List[Journaled] = []
        self._members: Set[int] = set()
        self._savepoints: List[_Savepoint] = []
        self._deferred: List[Callable[[], None]] = []
        self._block = 0

    @property
    def depth(self) -> int:
        return len(self._savepoints)

    @property
    def block(self) -> int:
        """Sequence number of the current (or last) top-level invocation."""

        return self._block

    def register(self, participant: Journaled) -> None:
        with self._lock:
            if id(participant) not in self._members:
                self._participants.append(participant)
                self._members.add(id(participant))

    def hosts(self, participant: object) -> bool:
        """Whether ``participant`` keeps its state on this ledger."""

        return id(participant) in self._members

    def touch(self, participant: Journaled) -> None:
        """Checkpoint ``participant`` in every open savepoint that lacks it.

        Must be called before the participant mutates its state.
        """

        with self._lock:
            key = id(participant)
            state: Any = None
            captured = False
            for savepoint in reversed(self._savepoints):
                if key in savepoint.states:
                    break
                if not captured:
                    state = participant.snapshot()
                    captured = True
                savepoint.states[key] = (participant, state)

    def defer(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once the outermost invocation commits.

        Callbacks deferred from a block that is rolled back are dropped.
        Outside of any invocation the callback runs immediately.
        """

        with self._lock:
            if not self._savepoints:
                self._run_callback(callback)
                return
            self._deferred.append(callback)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            savepoint = _Savepoint(deferred=len(self._deferred))
            self._savepoints.append(savepoint)
            if len(self._savepoints) == 1:
                self._block += 1
            try:
                yield
            except BaseException:
                self._rollback(savepoint)
                raise
            finally:
                self._savepoints.pop()
            if not self._savepoints:
                self._flush()

    def _rollback(self, savepoint: _Savepoint) -> None:
        for participant, state in reversed(list(savepoint.states.values())):
            participant.restore(state)
        del self._deferred[savepoint.deferred:]
        logger.debug(
            "Invocation rolled back",
            extra={"event": "ledger_rollback", "data": {"block": self._block, "depth": self.depth}},
        )

    def _flush(self) -> None:
        pending, self._deferred = self._deferred, []
        for callback in pending:
            self._run_callback(callback)

    def _run_callback(self, callback: Callable[[], None]) -> None:
        # Runs after commit: failures are logged and the next callback still runs.
        try:
            callback()
        except Exception:
            logger.exception(
                "Post-commit callback failed",
                extra={"event": "ledger_callback_failed", "data": {"block": self._block}},
            )


__all__ = ["Journaled", "Ledger"]
