# -*- coding: utf-8 -*-
"""
qash.ledger.balances
====================

Balance and supply arithmetic. Every operation here is validate-then-write:
all new values are computed with checked arithmetic first, and storage is only
touched once every check has passed. An abort therefore never leaves a partial
write behind, even without the host's journal.

Conservation
------------
``transfer`` moves value between two balances and never touches the total;
``mint`` adds the same amount to one balance and to the total. Together they
keep ``sum(balances) == total_supply``.
"""

from __future__ import annotations

from typing import Optional, Tuple

from ..config import LedgerConfig
from ..errors import InsufficientBalance, Underflow
from ..runtime.context import BytesLike, require_address
from ..runtime.events import EventSink, make_event
from ..runtime.storage import StorageCapability
from . import EVT_MINT, EVT_TRANSFER
from .access import AccessControl
from .keys import TOTAL_SUPPLY_KEY, balance_key
from .safe_uint import checked_add, checked_sub, decode_u64, encode_u64, require_u64


class Ledger:
    """Balances and total supply for one invocation."""

    def __init__(self, storage: StorageCapability, events: EventSink, access: AccessControl,
                 config: Optional[LedgerConfig] = None) -> None:
        self.storage = storage
        self.events = events
        self.access = access
        self.config = config or LedgerConfig()

    # ------------------------------------------------------------------
    # u64 slot IO
    # ------------------------------------------------------------------

    def read_u64(self, key: bytes) -> int:
        if self.storage.size(key) == 0:
            return 0
        return decode_u64(self.storage.get(key), key=key)

    def write_u64(self, key: bytes, value: int) -> None:
        self.storage.set(key, encode_u64(value))

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_balance(self, addr: BytesLike) -> int:
        return self.read_u64(balance_key(addr))

    def total_supply(self) -> int:
        return self.read_u64(TOTAL_SUPPLY_KEY)

    # ------------------------------------------------------------------
    # Single-account mutations
    # ------------------------------------------------------------------

    def credit(self, addr: BytesLike, value: int) -> int:
        """Add `value` to `addr`'s balance; returns the new balance."""
        key = balance_key(addr)
        new = checked_add(self.read_u64(key), require_u64(value))
        self.write_u64(key, new)
        return new

    def debit(self, addr: BytesLike, value: int) -> int:
        """Subtract `value` from `addr`'s balance; returns the new balance."""
        key = balance_key(addr)
        new = checked_sub(self.read_u64(key), require_u64(value))
        self.write_u64(key, new)
        return new

    # ------------------------------------------------------------------
    # Transfer
    # ------------------------------------------------------------------

    def prepare_transfer(self, from_addr: BytesLike, to_addr: BytesLike, value: int) -> Tuple[int, int]:
        """
        Validate a transfer and return ``(new_from, new_to)`` without writing.

        Aborts with Paused, InsufficientBalance or Overflow. For a self-transfer
        both returned values equal the unchanged balance.
        """
        src = require_address(from_addr, "from")
        dst = require_address(to_addr, "to")
        value = require_u64(value)

        self.access.require_not_paused()

        from_balance = self.get_balance(src)
        to_balance = self.get_balance(dst)
        try:
            new_from = checked_sub(from_balance, value)
        except Underflow:
            raise InsufficientBalance(balance=from_balance, value=value) from None

        if src == dst:
            return from_balance, from_balance
        new_to = checked_add(to_balance, value)
        return new_from, new_to

    def commit_transfer(self, from_addr: BytesLike, to_addr: BytesLike, value: int, memo: int,
                        new_balances: Tuple[int, int]) -> None:
        """Write balances computed by `prepare_transfer` and emit Transfer."""
        src = require_address(from_addr, "from")
        dst = require_address(to_addr, "to")
        new_from, new_to = new_balances
        self.write_u64(balance_key(src), new_from)
        self.write_u64(balance_key(dst), new_to)
        self.events.emit(make_event(EVT_TRANSFER, self._transfer_args(src, dst, value, memo)))

    def transfer(self, from_addr: BytesLike, to_addr: BytesLike, value: int, memo: int = 0) -> None:
        memo = require_u64(memo, "memo")
        new_balances = self.prepare_transfer(from_addr, to_addr, value)
        self.commit_transfer(from_addr, to_addr, value, memo, new_balances)

    def _transfer_args(self, src: bytes, dst: bytes, value: int, memo: int) -> dict:
        args = {"from": src, "to": dst, "value": value}
        if self.config.memo_field_present:
            args["memo"] = memo
        return args

    # ------------------------------------------------------------------
    # Supply
    # ------------------------------------------------------------------

    def mint(self, to_addr: BytesLike, amount: int) -> None:
        """
        Increase `to`'s balance and the total supply by `amount`.

        Unchecked permission: reached only from ``init`` (and the legacy
        bootstrap mint, which checks ownership itself).
        """
        dst = require_address(to_addr, "to")
        amount = require_u64(amount, "amount")

        new_total = checked_add(self.total_supply(), amount)
        new_balance = checked_add(self.get_balance(dst), amount)

        self.write_u64(balance_key(dst), new_balance)
        self.write_u64(TOTAL_SUPPLY_KEY, new_total)
        self.events.emit(make_event(EVT_MINT, {"address": dst, "value": amount}))


__all__ = ["Ledger"]
