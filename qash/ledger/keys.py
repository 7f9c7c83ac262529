# -*- coding: utf-8 -*-
"""
qash.ledger.keys
================

Deterministic storage-key derivation for the ledger. No storage I/O here.

Layout
------
  balances:    BALANCES_PREFIX   || <addr>                (9 + 35 = 44 bytes)
  allowances:  ALLOWANCES_PREFIX || <owner> || <spender>  (11 + 70 = 81 bytes)
  singletons:  OWNER_KEY, PAUSE_KEY, TOTAL_SUPPLY_KEY

Every prefix and singleton carries a trailing NUL byte; this is the layout
already present in deployed contract storage and must not change.

Key classes cannot collide: balance and allowance keys have different fixed
lengths and different first bytes, and every singleton is shorter than both.
"""

from __future__ import annotations

from typing import Final, Optional

from ..runtime.context import ADDRESS_SIZE, BytesLike, require_address

BALANCES_PREFIX: Final[bytes] = b"BALANCES\x00"
ALLOWANCES_PREFIX: Final[bytes] = b"ALLOWANCES\x00"

OWNER_KEY: Final[bytes] = b"OWNER\x00"
PAUSE_KEY: Final[bytes] = b"PAUSE\x00"
TOTAL_SUPPLY_KEY: Final[bytes] = b"TOTAL_SUPPLY\x00"

BALANCE_KEY_SIZE: Final[int] = len(BALANCES_PREFIX) + ADDRESS_SIZE
ALLOWANCE_KEY_SIZE: Final[int] = len(ALLOWANCES_PREFIX) + 2 * ADDRESS_SIZE

SINGLETON_KEYS: Final[dict] = {
    OWNER_KEY: "owner",
    PAUSE_KEY: "pause",
    TOTAL_SUPPLY_KEY: "total_supply",
}


def balance_key(addr: BytesLike) -> bytes:
    """
    Derive the canonical balance key for an address.
    """
    return BALANCES_PREFIX + require_address(addr)


def allowance_key(owner: BytesLike, spender: BytesLike) -> bytes:
    """
    Derive the canonical allowance key for (owner, spender).
    """
    return ALLOWANCES_PREFIX + require_address(owner, "owner") + require_address(spender, "spender")


def classify_key(key: bytes) -> Optional[str]:
    """
    Name the key class of `key`: "balance", "allowance", "owner", "pause",
    "total_supply", or None for keys the ledger never writes.
    """
    if key in SINGLETON_KEYS:
        return SINGLETON_KEYS[key]
    if len(key) == BALANCE_KEY_SIZE and key.startswith(BALANCES_PREFIX):
        return "balance"
    if len(key) == ALLOWANCE_KEY_SIZE and key.startswith(ALLOWANCES_PREFIX):
        return "allowance"
    return None


def address_of_balance_key(key: bytes) -> bytes:
    if classify_key(key) != "balance":
        raise ValueError("not a balance key")
    return key[len(BALANCES_PREFIX):]


__all__ = [
    "BALANCES_PREFIX",
    "ALLOWANCES_PREFIX",
    "OWNER_KEY",
    "PAUSE_KEY",
    "TOTAL_SUPPLY_KEY",
    "BALANCE_KEY_SIZE",
    "ALLOWANCE_KEY_SIZE",
    "SINGLETON_KEYS",
    "balance_key",
    "allowance_key",
    "classify_key",
    "address_of_balance_key",
]
