"""Emergency pause control plane.

A :class:`~system_pause.controller.SystemPauseController` lets pausers halt
every registered resource at once, while the owner alone can resume them,
edit the registry, or migrate all of them to a new controller atomically.
Resources take part by embedding a :class:`~system_pause.guard.ControllerGuard`.
"""

from .config import SystemPauseConfig, load_config
from .controller import BroadcastReport, SystemPauseController
from .deployment import Deployment, deploy
from .errors import (
    AlreadyActive,
    AlreadyPaused,
    InvalidPrincipal,
    InvalidTarget,
    ResourcePaused,
    SystemPauseError,
    TargetCallFailure,
    Unauthorized,
)
from .events import Event, EventBus
from .guard import ControllerGuard, when_not_paused
from .interface import Pausable
from .ledger import Ledger
from .metrics import PauseMetrics
from .resources import StakeVault
from .types import ZERO_ADDRESS

__all__ = [
    "AlreadyActive",
    "AlreadyPaused",
    "BroadcastReport",
    "ControllerGuard",
    "Deployment",
    "Event",
    "EventBus",
    "InvalidPrincipal",
    "InvalidTarget",
    "Ledger",
    "Pausable",
    "PauseMetrics",
    "ResourcePaused",
    "StakeVault",
    "SystemPauseConfig",
    "SystemPauseController",
    "SystemPauseError",
    "TargetCallFailure",
    "Unauthorized",
    "ZERO_ADDRESS",
    "deploy",
    "load_config",
    "when_not_paused",
]
