# -*- coding: utf-8 -*-
"""
QASH fungible token
===================

The public operation surface of the ledger. A `QashToken` is bound to one
storage capability; every mutating call takes the `InvocationContext` that
identifies the caller (and creator) and receives the invocation's events.
Nothing is cached across calls: each method reads what it needs, computes, and
writes back.

Public interface (ABI sketch)
-----------------------------
# state-changing
init(ctx, initial_supply: int) -> None
change_owner(ctx, new_owner: bytes) -> None
pause(ctx) -> None
unpause(ctx) -> None
transfer(ctx, to: bytes, value: int, memo: int) -> None
approve(ctx, spender: bytes, value: int) -> None
transfer_from(ctx, from_: bytes, to: bytes, value: int, memo: int) -> None
mint(ctx, amount: int) -> None                  # legacy variant only

# views
get_owner(ctx) -> bytes | None                  # also emits Owner(owner)
get_balance(ctx, addr: bytes) -> int
is_paused(ctx) -> bool
get_allowance(ctx, owner: bytes, spender: bytes) -> int
get_decimals(ctx) -> int
get_symbol(ctx) -> int                          # 8 ASCII bytes, little-endian u64
get_total_supply(ctx) -> int
is_initialized(ctx) -> bool

Notes
-----
- Addresses are raw 35-byte `bytes`; hex strings are accepted and normalized.
- Integers are u64. Anything outside [0, 2**64-1] aborts with InvalidArgument.
- `init` is the canonical way the contract comes into existence. The legacy
  `mint` path (owner bootstrapped by the creator's first mint) exists only when
  the deployment sets ``require_explicit_init=False``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..config import LedgerConfig, SYMBOL_MAX_BYTES
from ..errors import AlreadyInitialized, Unsupported
from ..runtime.context import BytesLike, InvocationContext
from ..runtime.storage import StorageCapability
from .access import AccessControl
from .allowances import AllowanceRegistry
from .balances import Ledger
from .keys import OWNER_KEY
from .safe_uint import require_u64


def encode_symbol(sym: bytes) -> int:
    """NUL-pad an up-to-8-byte symbol and read it as a little-endian u64."""
    if not (1 <= len(sym) <= SYMBOL_MAX_BYTES):
        raise ValueError("symbol must be 1..8 bytes")
    return int.from_bytes(bytes(sym).ljust(SYMBOL_MAX_BYTES, b"\x00"), "little")


def decode_symbol(n: int) -> bytes:
    return int(n).to_bytes(SYMBOL_MAX_BYTES, "little").rstrip(b"\x00")


@dataclass
class _Parts:
    access: AccessControl
    ledger: Ledger
    allowances: AllowanceRegistry


class QashToken:
    """QASH token operations over one storage capability."""

    def __init__(self, storage: StorageCapability, config: Optional[LedgerConfig] = None) -> None:
        self.storage = storage
        self.config = config or LedgerConfig()

    def _parts(self, ctx: InvocationContext) -> _Parts:
        access = AccessControl(self.storage, ctx.events, self.config)
        ledger = Ledger(self.storage, ctx.events, access, self.config)
        allowances = AllowanceRegistry(self.storage, ctx.events, ledger, self.config)
        return _Parts(access, ledger, allowances)

    # ------------------------------------------------------------------
    # Initialization & ownership
    # ------------------------------------------------------------------

    def init(self, ctx: InvocationContext, initial_supply: int) -> None:
        """
        One-time initializer: the caller becomes owner and receives the
        initial supply. Fails with AlreadyInitialized once an owner exists.
        """
        initial_supply = require_u64(initial_supply, "initial_supply")
        if self.storage.size(OWNER_KEY) != 0:
            raise AlreadyInitialized()
        p = self._parts(ctx)
        owner = p.access.assign_owner(ctx.caller)
        p.ledger.mint(owner, initial_supply)

    def mint(self, ctx: InvocationContext, amount: int) -> None:
        """
        Legacy bootstrap mint. With no owner set, a call from the creator first
        makes the creator owner; the caller must then be the owner.
        """
        if self.config.require_explicit_init:
            raise Unsupported("mint is only reachable through init")
        amount = require_u64(amount, "amount")
        p = self._parts(ctx)
        if p.access.owner() is None and ctx.caller_is_creator():
            p.access.assign_owner(ctx.creator)
        p.access.require_owner(ctx.caller)
        p.ledger.mint(ctx.caller, amount)

    def is_initialized(self, ctx: InvocationContext) -> bool:
        return self.storage.size(OWNER_KEY) != 0

    def get_owner(self, ctx: InvocationContext) -> Optional[bytes]:
        return self._parts(ctx).access.announce_owner()

    def change_owner(self, ctx: InvocationContext, new_owner: BytesLike) -> None:
        self._parts(ctx).access.change_owner(ctx.caller, new_owner)

    # ------------------------------------------------------------------
    # Pause
    # ------------------------------------------------------------------

    def is_paused(self, ctx: InvocationContext) -> bool:
        return self._parts(ctx).access.is_paused()

    def pause(self, ctx: InvocationContext) -> None:
        self._parts(ctx).access.pause(ctx.caller)

    def unpause(self, ctx: InvocationContext) -> None:
        self._parts(ctx).access.unpause(ctx.caller)

    # ------------------------------------------------------------------
    # Balances & transfers
    # ------------------------------------------------------------------

    def get_balance(self, ctx: InvocationContext, addr: BytesLike) -> int:
        return self._parts(ctx).ledger.get_balance(addr)

    def transfer(self, ctx: InvocationContext, to: BytesLike, value: int, memo: int = 0) -> None:
        self._parts(ctx).ledger.transfer(ctx.caller, to, value, memo)

    # ------------------------------------------------------------------
    # Allowances
    # ------------------------------------------------------------------

    def get_allowance(self, ctx: InvocationContext, owner: BytesLike, spender: BytesLike) -> int:
        return self._parts(ctx).allowances.get_allowance(owner, spender)

    def approve(self, ctx: InvocationContext, spender: BytesLike, value: int) -> None:
        self._parts(ctx).allowances.approve(ctx.caller, spender, value)

    def transfer_from(self, ctx: InvocationContext, from_: BytesLike, to: BytesLike,
                      value: int, memo: int = 0) -> None:
        self._parts(ctx).allowances.transfer_from(ctx.caller, from_, to, value, memo)

    # ------------------------------------------------------------------
    # Metadata (pure)
    # ------------------------------------------------------------------

    def get_decimals(self, ctx: InvocationContext) -> int:
        return self.config.decimals

    def get_symbol(self, ctx: InvocationContext) -> int:
        return encode_symbol(self.config.symbol)

    def get_total_supply(self, ctx: InvocationContext) -> int:
        return self._parts(ctx).ledger.total_supply()


__all__ = ["QashToken", "encode_symbol", "decode_symbol"]
