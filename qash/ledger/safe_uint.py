# -*- coding: utf-8 -*-
"""
qash.ledger.safe_uint
=====================

Checked unsigned 64-bit arithmetic and the on-storage u64 codec.

Goals
-----
- Every balance, allowance and supply value lives in [0, U64_MAX].
- **Checked** arithmetic only: overflow/underflow abort, nothing wraps or
  saturates.
- Integer-only, deterministic, with stable error types from `qash.errors`.

Storage codec
-------------
u64 values are stored as 8 little-endian bytes (the native layout of the
little-endian WASM target the ledger historically ran on). An absent or empty
value decodes to 0; any other width is `CorruptState`.
"""

from __future__ import annotations

from typing import Final, Optional

from ..errors import CorruptState, InvalidArgument, Overflow, Underflow

U64_MAX: Final[int] = (1 << 64) - 1
U64_BYTES: Final[int] = 8


# ---------------------------------------------------------------------------
# Domain guards
# ---------------------------------------------------------------------------

def is_u64(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= U64_MAX


def require_u64(x: object, name: str = "value") -> int:
    """Abort with InvalidArgument unless `x` is an int in [0, U64_MAX]."""
    if not is_u64(x):
        raise InvalidArgument(f"{name} must be an integer in [0, 2**64-1]", name=name)
    return int(x)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Checked (fail-fast on errors)
# ---------------------------------------------------------------------------

def checked_add(a: int, b: int) -> int:
    """Checked add: Overflow when a + b exceeds U64_MAX."""
    require_u64(a, "a")
    require_u64(b, "b")
    s = a + b
    if s > U64_MAX:
        raise Overflow(a=a, b=b)
    return s


def checked_sub(a: int, b: int) -> int:
    """Checked sub: Underflow when b > a."""
    require_u64(a, "a")
    require_u64(b, "b")
    if b > a:
        raise Underflow(a=a, b=b)
    return a - b


# ---------------------------------------------------------------------------
# Storage codec
# ---------------------------------------------------------------------------

def encode_u64(n: int) -> bytes:
    return require_u64(n).to_bytes(U64_BYTES, "little")


def decode_u64(raw: Optional[bytes], *, key: Optional[bytes] = None) -> int:
    if not raw:
        return 0
    if len(raw) != U64_BYTES:
        raise CorruptState(
            f"u64 slot holds {len(raw)} bytes",
            key=("0x" + key.hex()) if key is not None else None,
        )
    return int.from_bytes(raw, "little")


__all__ = [
    "U64_MAX",
    "U64_BYTES",
    "is_u64",
    "require_u64",
    "checked_add",
    "checked_sub",
    "encode_u64",
    "decode_u64",
]
