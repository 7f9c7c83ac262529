# -*- coding: utf-8 -*-
"""
qash.ledger.allowances
======================

Delegated spending rights layered on the balance ledger.

- ``approve`` **overwrites** the stored allowance for (owner, spender); it never
  adds to it. Approving zero revokes.
- ``transfer_from`` spends from the allowance and moves balances exactly like
  ``transfer``. Both the allowance debit and the balance move are validated
  before the first write, so a failure in either leaves no trace.
"""

from __future__ import annotations

from typing import Optional

from ..config import LedgerConfig
from ..errors import InsufficientAllowance, Underflow
from ..runtime.context import BytesLike, require_address
from ..runtime.events import EventSink, make_event
from ..runtime.storage import StorageCapability
from . import EVT_APPROVAL
from .balances import Ledger
from .keys import allowance_key
from .safe_uint import checked_sub, require_u64


class AllowanceRegistry:
    """Approve/consume allowances for one invocation."""

    def __init__(self, storage: StorageCapability, events: EventSink, ledger: Ledger,
                 config: Optional[LedgerConfig] = None) -> None:
        self.storage = storage
        self.events = events
        self.ledger = ledger
        self.config = config or LedgerConfig()

    def get_allowance(self, owner: BytesLike, spender: BytesLike) -> int:
        return self.ledger.read_u64(allowance_key(owner, spender))

    def approve(self, owner: BytesLike, spender: BytesLike, value: int) -> None:
        o = require_address(owner, "owner")
        s = require_address(spender, "spender")
        value = require_u64(value)
        self.ledger.write_u64(allowance_key(o, s), value)
        self.events.emit(make_event(EVT_APPROVAL, {"owner": o, "spender": s, "value": value}))

    def transfer_from(self, spender: BytesLike, from_addr: BytesLike, to_addr: BytesLike,
                      value: int, memo: int = 0) -> None:
        """
        `spender` moves `value` from `from_addr` to `to_addr` out of its allowance.
        """
        s = require_address(spender, "spender")
        src = require_address(from_addr, "from")
        value = require_u64(value)
        memo = require_u64(memo, "memo")

        key = allowance_key(src, s)
        current = self.ledger.read_u64(key)
        try:
            remaining = checked_sub(current, value)
        except Underflow:
            raise InsufficientAllowance(allowance=current, value=value) from None

        new_balances = self.ledger.prepare_transfer(src, to_addr, value)

        self.ledger.write_u64(key, remaining)
        self.ledger.commit_transfer(src, to_addr, value, memo, new_balances)


__all__ = ["AllowanceRegistry"]
