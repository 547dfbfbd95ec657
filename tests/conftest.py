"""Shared fixtures wiring a controller to a handful of stake vaults."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from system_pause.controller import SystemPauseController
from system_pause.events import EventBus
from system_pause.ledger import Ledger
from system_pause.resources import StakeVault

OWNER = "0x00000000000000000000000000000000000000a1"
PAUSER = "0x00000000000000000000000000000000000000b1"
STRANGER = "0x00000000000000000000000000000000000000e1"
CONTROLLER = "0x00000000000000000000000000000000000000c0"
NEW_CONTROLLER = "0x00000000000000000000000000000000000000c1"


@pytest.fixture
def ledger() -> Ledger:
    return Ledger()


@pytest.fixture
def bus(ledger: Ledger) -> EventBus:
    return EventBus(ledger)


@pytest.fixture
def controller(ledger: Ledger, bus: EventBus) -> SystemPauseController:
    return SystemPauseController(ledger, bus, address=CONTROLLER, owner=OWNER, pausers=[PAUSER])


@pytest.fixture
def vaults(ledger: Ledger, bus: EventBus) -> Dict[str, StakeVault]:
    return {
        name: StakeVault(ledger, bus, name=name, address=f"0x{index:040x}", controller=CONTROLLER)
        for index, name in enumerate(("A", "B", "C"), start=1)
    }
