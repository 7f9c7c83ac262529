# -*- coding: utf-8 -*-
"""
qash.ledger.access
==================

Owner identity and the global pause switch.

Owner
-----
- Stored raw (35 bytes) at ``OWNER_KEY``; an empty slot means "no owner yet".
- ``change_owner`` is owner-only and emits ``ChangeOwner(old, new)``.

Pause state machine
-------------------
States ``{Active, Paused}``; Active when the flag slot is empty or ``0x00``.

- ``pause``:   owner-only; Active → Paused, emits ``Pause()``
- ``unpause``: owner-only; Paused → Active, emits ``Unpause()``
- A self-transition (pause while Paused, unpause while Active) is an
  ``InvalidStateTransition`` abort, unless the deployment enables
  ``allow_double_pause_noop``, in which case it changes nothing and emits
  nothing.

Only transfers consult the flag (``require_not_paused``); ownership changes,
approvals, minting and reads are unaffected by it.
"""
from __future__ import annotations

from typing import Optional

from ..config import LedgerConfig
from ..errors import CorruptState, InvalidStateTransition, Paused, Unauthorized
from ..runtime.context import BytesLike, require_address
from ..runtime.events import EventSink, make_event
from ..runtime.storage import StorageCapability
from . import EVT_CHANGE_OWNER, EVT_OWNER, EVT_PAUSE, EVT_UNPAUSE
from .keys import OWNER_KEY, PAUSE_KEY

FLAG_ACTIVE = b"\x00"
FLAG_PAUSED = b"\x01"

STATE_ACTIVE = "Active"
STATE_PAUSED = "Paused"


class AccessControl:
    """Owner checks and pause transitions against one invocation's storage."""

    def __init__(self, storage: StorageCapability, events: EventSink,
                 config: Optional[LedgerConfig] = None) -> None:
        self.storage = storage
        self.events = events
        self.config = config or LedgerConfig()

    # --- owner ----------------------------------------------------------------

    def owner(self) -> Optional[bytes]:
        """Return the current owner address, or None if not set."""
        if self.storage.size(OWNER_KEY) == 0:
            return None
        return self.storage.get(OWNER_KEY)

    def is_owner(self, caller: BytesLike) -> bool:
        owner = self.owner()
        return owner is not None and owner == require_address(caller, "caller")

    def require_owner(self, caller: BytesLike) -> None:
        if not self.is_owner(caller):
            raise Unauthorized()

    def assign_owner(self, owner: BytesLike) -> bytes:
        """
        Write the first owner and emit ``Owner(owner)``. Callers are responsible
        for checking that no owner exists yet.
        """
        addr = require_address(owner, "owner")
        self.storage.set(OWNER_KEY, addr)
        self.events.emit(make_event(EVT_OWNER, {"owner": addr}))
        return addr

    def announce_owner(self) -> Optional[bytes]:
        """Emit ``Owner(owner)`` for the stored owner and return it (None before init)."""
        owner = self.owner()
        if owner is not None:
            self.events.emit(make_event(EVT_OWNER, {"owner": owner}))
        return owner

    def change_owner(self, caller: BytesLike, new_owner: BytesLike) -> None:
        self.require_owner(caller)
        new = require_address(new_owner, "new_owner")
        old = self.owner()
        self.storage.set(OWNER_KEY, new)
        self.events.emit(make_event(EVT_CHANGE_OWNER, {"old": old, "new": new}))

    # --- pause ----------------------------------------------------------------

    def is_paused(self) -> bool:
        raw = self.storage.get(PAUSE_KEY)
        if not raw:
            return False
        if len(raw) != 1:
            raise CorruptState(f"pause flag holds {len(raw)} bytes", key="0x" + PAUSE_KEY.hex())
        return raw != FLAG_ACTIVE

    def state(self) -> str:
        return STATE_PAUSED if self.is_paused() else STATE_ACTIVE

    def require_not_paused(self) -> None:
        if self.is_paused():
            raise Paused()

    def pause(self, caller: BytesLike) -> bool:
        """
        Active → Paused. Returns True if the state changed.
        """
        self.require_owner(caller)
        if self.is_paused():
            if self.config.allow_double_pause_noop:
                return False
            raise InvalidStateTransition("already paused", state=STATE_PAUSED)
        self.storage.set(PAUSE_KEY, FLAG_PAUSED)
        self.events.emit(make_event(EVT_PAUSE))
        return True

    def unpause(self, caller: BytesLike) -> bool:
        """
        Paused → Active. Returns True if the state changed.
        """
        self.require_owner(caller)
        if not self.is_paused():
            if self.config.allow_double_pause_noop:
                return False
            raise InvalidStateTransition("not paused", state=STATE_ACTIVE)
        self.storage.set(PAUSE_KEY, FLAG_ACTIVE)
        self.events.emit(make_event(EVT_UNPAUSE))
        return True


__all__ = [
    "AccessControl",
    "FLAG_ACTIVE",
    "FLAG_PAUSED",
    "STATE_ACTIVE",
    "STATE_PAUSED",
]
