# -*- coding: utf-8 -*-
"""
qash.ledger
===========

Accounting core of the QASH fungible token: balances, allowances, total supply,
ownership and the pause switch, all persisted through an injected storage
capability.

Components (leaves first)
-------------------------
- keys:        deterministic storage-key derivation
- safe_uint:   checked u64 arithmetic and the u64 storage codec
- access:      owner identity and the two-state pause switch
- balances:    balance/supply arithmetic, transfer, mint
- allowances:  approve / transfer_from on top of balances
- contract:    `QashToken`, the public operation surface

Events (names as str), in the order the host receives them:
  Owner(owner), ChangeOwner(old, new), Mint(address, value),
  Transfer(from, to, value, memo), Approval(owner, spender, value),
  Pause(), Unpause()
"""

from __future__ import annotations

from typing import Final

EVT_OWNER: Final[str] = "Owner"
EVT_CHANGE_OWNER: Final[str] = "ChangeOwner"
EVT_MINT: Final[str] = "Mint"
EVT_TRANSFER: Final[str] = "Transfer"
EVT_APPROVAL: Final[str] = "Approval"
EVT_PAUSE: Final[str] = "Pause"
EVT_UNPAUSE: Final[str] = "Unpause"

from .contract import QashToken, decode_symbol, encode_symbol  # noqa: E402

__all__ = [
    "EVT_OWNER",
    "EVT_CHANGE_OWNER",
    "EVT_MINT",
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "EVT_PAUSE",
    "EVT_UNPAUSE",
    "QashToken",
    "encode_symbol",
    "decode_symbol",
]
