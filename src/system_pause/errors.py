"""Exception taxonomy for the pause control plane."""

from __future__ import annotations


class SystemPauseError(Exception):
    """Base class for every failure raised by this package."""


class Unauthorized(SystemPauseError, PermissionError):
    """Caller lacks the required role or is not the recorded controller."""

    def __init__(self, caller: str, required: str) -> None:
        super().__init__(f"{caller} is not authorized: {required} required")
        self.caller = caller
        self.required = required


class InvalidPrincipal(SystemPauseError, ValueError):
    def __init__(self, principal: object) -> None:
        super().__init__(f"invalid principal: {principal!r}")
        self.principal = principal


class InvalidTarget(SystemPauseError, ValueError):
    def __init__(self, target: object) -> None:
        super().__init__(f"invalid target: {target!r}")
        self.target = target


class AlreadyPaused(SystemPauseError):
    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} is already paused")
        self.resource = resource


class AlreadyActive(SystemPauseError):
    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} is not paused")
        self.resource = resource


class ResourcePaused(SystemPauseError):
    """A business operation was attempted while its resource is paused."""

    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} is paused")
        self.resource = resource


class TargetCallFailure(SystemPauseError):
    """A target rejected a call that must succeed for the whole batch."""

    def __init__(self, target: str, operation: str, reason: str) -> None:
        super().__init__(f"{operation} failed on {target}: {reason}")
        self.target = target
        self.operation = operation
        self.reason = reason


__all__ = [
    "AlreadyActive",
    "AlreadyPaused",
    "InvalidPrincipal",
    "InvalidTarget",
    "ResourcePaused",
    "SystemPauseError",
    "TargetCallFailure",
    "Unauthorized",
]
