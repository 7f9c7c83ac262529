from __future__ import annotations

import pytest

from qash.config import LedgerConfig
from qash.errors import CorruptState, InvalidStateTransition, Unauthorized
from qash.ledger.access import AccessControl, FLAG_ACTIVE, FLAG_PAUSED, STATE_ACTIVE, STATE_PAUSED
from qash.ledger.keys import OWNER_KEY, PAUSE_KEY
from qash.runtime.events import MemoryEventSink
from qash.runtime.storage import MemoryStorage


@pytest.fixture
def access(alice):
    storage = MemoryStorage({OWNER_KEY: alice})
    return AccessControl(storage, MemoryEventSink(), LedgerConfig())


def test_initially_active(access):
    assert access.is_paused() is False
    assert access.state() == STATE_ACTIVE


def test_pause_unpause_cycle(access, alice):
    assert access.pause(alice) is True
    assert access.storage.get(PAUSE_KEY) == FLAG_PAUSED
    assert access.state() == STATE_PAUSED
    assert access.unpause(alice) is True
    assert access.storage.get(PAUSE_KEY) == FLAG_ACTIVE
    assert access.events.names() == ["Pause", "Unpause"]


def test_double_pause_is_invalid(access, alice):
    access.pause(alice)
    with pytest.raises(InvalidStateTransition) as ei:
        access.pause(alice)
    assert ei.value.data == {"state": STATE_PAUSED}
    assert access.events.names() == ["Pause"]


def test_unpause_while_active_is_invalid(access, alice):
    with pytest.raises(InvalidStateTransition):
        access.unpause(alice)
    assert len(access.events) == 0


def test_double_pause_noop_when_enabled(alice):
    access = AccessControl(
        MemoryStorage({OWNER_KEY: alice}),
        MemoryEventSink(),
        LedgerConfig(allow_double_pause_noop=True),
    )
    assert access.unpause(alice) is False
    assert access.pause(alice) is True
    assert access.pause(alice) is False
    assert access.events.names() == ["Pause"]


@pytest.mark.parametrize("op", ["pause", "unpause"])
def test_pause_requires_owner(access, bob, op):
    with pytest.raises(Unauthorized):
        getattr(access, op)(bob)


def test_owner_check_precedes_state_check(access, alice, bob):
    access.pause(alice)
    # non-owner pausing an already paused ledger is Unauthorized, not a transition error
    with pytest.raises(Unauthorized):
        access.pause(bob)


def test_no_owner_means_nobody_is_authorized(alice):
    access = AccessControl(MemoryStorage(), MemoryEventSink())
    assert access.owner() is None
    with pytest.raises(Unauthorized):
        access.pause(alice)


def test_change_owner(access, alice, bob):
    access.change_owner(alice, bob)
    assert access.owner() == bob
    (ev,) = access.events.events
    assert ev.name == "ChangeOwner"
    assert ev.args == {"old": alice, "new": bob}
    with pytest.raises(Unauthorized):
        access.change_owner(alice, alice)


def test_announce_owner_emits(access, alice):
    assert access.announce_owner() == alice
    assert access.events.names() == ["Owner"]


def test_corrupt_pause_flag(access):
    access.storage.set(PAUSE_KEY, b"\x01\x01")
    with pytest.raises(CorruptState):
        access.is_paused()
