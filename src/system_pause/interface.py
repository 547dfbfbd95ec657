"""Capability contract every managed resource exposes to its controller."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .types import Principal


@runtime_checkable
class Pausable(Protocol):
    """The four operations a controller may invoke on a managed resource.

    ``caller`` carries the identity of the invoking principal, which is the
    controller's own address when the call comes from a broadcast.
    """

    def pause(self, caller: Principal) -> None:
        ...

    def unpause(self, caller: Principal) -> None:
        ...

    def update_controller(self, caller: Principal, new_controller: Principal) -> None:
        ...

    def controller(self) -> Principal:
        ...


def describe_target(target: object) -> str:
    """Human readable identifier used in logs and error messages."""

    for attribute in ("name", "address"):
        value = getattr(target, attribute, None)
        if isinstance(value, str) and value:
            return value
    return repr(target)


__all__ = ["Pausable", "describe_target"]
