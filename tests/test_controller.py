import pytest

from conftest import CONTROLLER, NEW_CONTROLLER, OWNER, PAUSER, STRANGER
from system_pause.errors import InvalidTarget, TargetCallFailure, Unauthorized
from system_pause.events import EventBus
from system_pause.ledger import Ledger
from system_pause.resources import StakeVault
from system_pause.types import ZERO_ADDRESS


class RejectingVault(StakeVault):
    """Vault whose own checks refuse any controller hand-over."""

    def update_controller(self, caller, new_controller):
        self.guard.only_controller(caller)
        raise RuntimeError("controller hand-over refused")


class HalfPausingVault(StakeVault):
    """Vault that records the pause and then blows up."""

    def pause(self, caller):
        self.guard.pause(caller)
        raise RuntimeError("post-pause hook failed")


class ForeignTarget:
    """Capability implementation living outside the controller's ledger."""

    def __init__(self, controller):
        self._controller = controller
        self.calls = []

    def pause(self, caller):
        self.calls.append("pause")

    def unpause(self, caller):
        self.calls.append("unpause")

    def update_controller(self, caller, new_controller):
        self.calls.append("update_controller")
        self._controller = new_controller

    def controller(self):
        return self._controller


class JournaledTarget:
    """Hand-written capability implementation that keeps its state on the ledger."""

    def __init__(self, ledger, name, controller, refuse=False):
        self.name = name
        self._ledger = ledger
        self._controller = controller
        self._refuse = refuse
        ledger.register(self)

    def pause(self, caller):
        pass

    def unpause(self, caller):
        pass

    def update_controller(self, caller, new_controller):
        if self._refuse:
            raise RuntimeError(f"{self.name} refuses hand-over")
        self._ledger.touch(self)
        self._controller = new_controller

    def controller(self):
        return self._controller

    def snapshot(self):
        return self._controller

    def restore(self, state):
        self._controller = state


def test_pause_all_scenario_with_one_target_already_paused(controller, vaults, bus):
    a, b, c = vaults["A"], vaults["B"], vaults["C"]
    controller.add_targets(OWNER, [a, b, c])
    b.pause(CONTROLLER)

    report = controller.pause_all(PAUSER)

    assert a.paused and b.paused and c.paused
    assert report.failed == ["B"]
    assert sorted(report.succeeded) == ["A", "C"]
    triggered = list(bus.find("PauseTriggered"))
    assert len(triggered) == 1
    assert triggered[0].payload == {"caller": PAUSER}


def test_pause_all_by_owner(controller, vaults):
    controller.add_targets(OWNER, vaults.values())
    controller.pause_all(OWNER)
    assert all(vault.paused for vault in vaults.values())


def test_pause_all_requires_pauser(controller, vaults, bus):
    controller.add_targets(OWNER, vaults.values())
    with pytest.raises(Unauthorized):
        controller.pause_all(STRANGER)
    assert not any(vault.paused for vault in vaults.values())
    assert bus.latest("PauseTriggered") is None


def test_pause_all_on_empty_registry_still_notifies(controller, bus):
    report = controller.pause_all(PAUSER)
    assert report.succeeded == [] and report.failed == []
    assert bus.latest("PauseTriggered").payload == {"caller": PAUSER}


def test_pause_all_contains_targets_controlled_elsewhere(controller, vaults, bus):
    controller.add_targets(OWNER, vaults.values())
    vaults["A"].update_controller(CONTROLLER, NEW_CONTROLLER)
    report = controller.pause_all(PAUSER)
    assert report.failed == ["A"]
    assert not vaults["A"].paused
    assert vaults["B"].paused and vaults["C"].paused


def test_failed_target_call_is_rolled_back_on_its_own(controller, ledger, bus, vaults):
    flaky = HalfPausingVault(ledger, bus, name="flaky", address="0x" + "f" * 40, controller=CONTROLLER)
    controller.add_targets(OWNER, [vaults["A"], flaky])

    report = controller.pause_all(PAUSER)

    assert report.failed == ["flaky"]
    assert vaults["A"].paused
    assert not flaky.paused
    paused_resources = [event.payload["resource"] for event in bus.find("Paused")]
    assert paused_resources == ["A"]


def test_unpause_all_is_owner_only(controller, vaults, bus):
    controller.add_targets(OWNER, vaults.values())
    controller.pause_all(PAUSER)
    with pytest.raises(Unauthorized):
        controller.unpause_all(PAUSER)
    assert all(vault.paused for vault in vaults.values())

    vaults["C"].unpause(CONTROLLER)
    report = controller.unpause_all(OWNER)
    assert report.failed == ["C"]
    assert not any(vault.paused for vault in vaults.values())
    unpaused = list(bus.find("UnpauseTriggered"))
    assert len(unpaused) == 1
    assert unpaused[0].payload == {}


def test_migrate_all_repoints_every_target(controller, vaults, bus):
    controller.add_targets(OWNER, vaults.values())
    controller.migrate_all(OWNER, NEW_CONTROLLER)
    assert {vault.controller() for vault in vaults.values()} == {NEW_CONTROLLER}
    assert bus.latest("MigrationTriggered").payload == {"new_controller": NEW_CONTROLLER}
    with pytest.raises(Unauthorized):
        vaults["A"].pause(CONTROLLER)


def test_migrate_all_requires_owner(controller, vaults):
    controller.add_targets(OWNER, vaults.values())
    with pytest.raises(Unauthorized):
        controller.migrate_all(PAUSER, NEW_CONTROLLER)
    assert {vault.controller() for vault in vaults.values()} == {CONTROLLER}


def test_migrate_all_is_atomic(controller, ledger, bus, vaults):
    a = vaults["A"]
    b = RejectingVault(ledger, bus, name="B*", address="0x" + "b" * 40, controller=CONTROLLER)
    controller.add_targets(OWNER, [a, b])

    with pytest.raises(TargetCallFailure) as excinfo:
        controller.migrate_all(OWNER, NEW_CONTROLLER)

    assert excinfo.value.target == "B*"
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert a.controller() == CONTROLLER
    assert b.controller() == CONTROLLER
    assert bus.latest("MigrationTriggered") is None
    assert bus.latest("ControllerUpdated") is None


def test_migrate_all_refuses_when_a_target_is_controlled_elsewhere(controller, vaults):
    controller.add_targets(OWNER, vaults.values())
    vaults["C"].update_controller(CONTROLLER, NEW_CONTROLLER)
    with pytest.raises(TargetCallFailure) as excinfo:
        controller.migrate_all(OWNER, STRANGER)
    assert excinfo.value.target == "C"
    assert vaults["A"].controller() == CONTROLLER
    assert vaults["B"].controller() == CONTROLLER


def test_migrate_all_to_zero_address_burns_pausability(controller, vaults):
    controller.add_targets(OWNER, vaults.values())
    controller.migrate_all(OWNER, ZERO_ADDRESS)
    assert {vault.controller() for vault in vaults.values()} == {ZERO_ADDRESS}
    report = controller.pause_all(OWNER)
    assert sorted(report.failed) == ["A", "B", "C"]
    assert not any(vault.paused for vault in vaults.values())


def test_targets_outside_the_ledger_are_rejected(controller, bus, vaults):
    elsewhere = Ledger()
    stray = StakeVault(elsewhere, EventBus(elsewhere), name="stray", address="0x" + "d" * 40, controller=CONTROLLER)
    with pytest.raises(InvalidTarget):
        controller.add_targets(OWNER, [vaults["A"], ForeignTarget(CONTROLLER)])
    with pytest.raises(InvalidTarget):
        controller.add_targets(OWNER, [stray])
    assert controller.list_targets() == set()
    assert bus.latest("TargetAdded") is None


def test_custom_journaled_targets_migrate_all_or_nothing(controller, ledger):
    first = JournaledTarget(ledger, "first", CONTROLLER)
    second = JournaledTarget(ledger, "second", CONTROLLER, refuse=True)
    controller.add_targets(OWNER, [first, second])

    with pytest.raises(TargetCallFailure):
        controller.migrate_all(OWNER, NEW_CONTROLLER)

    assert first.controller() == CONTROLLER
    assert second.controller() == CONTROLLER

    controller.remove_targets(OWNER, [second])
    controller.migrate_all(OWNER, NEW_CONTROLLER)
    assert first.controller() == NEW_CONTROLLER


def test_failing_subscriber_does_not_fail_a_committed_pause(controller, bus, vaults):
    heard = []

    def broken(event):
        raise RuntimeError("dashboard offline")

    bus.subscribe(broken)
    bus.subscribe(lambda event: heard.append(event.type))
    controller.add_targets(OWNER, vaults.values())
    heard.clear()

    report = controller.pause_all(PAUSER)

    assert report.failed == []
    assert all(vault.paused for vault in vaults.values())
    assert heard == ["Paused", "Paused", "Paused", "PauseTriggered"]


def test_subscribers_only_hear_committed_events(controller, ledger, bus, vaults):
    heard = []
    bus.subscribe(lambda event: heard.append(event.type))
    b = RejectingVault(ledger, bus, name="B*", address="0x" + "b" * 40, controller=CONTROLLER)
    controller.add_targets(OWNER, [vaults["A"], b])
    heard.clear()

    with pytest.raises(TargetCallFailure):
        controller.migrate_all(OWNER, NEW_CONTROLLER)
    assert heard == []

    controller.pause_all(PAUSER)
    assert heard == ["Paused", "Paused", "PauseTriggered"]
