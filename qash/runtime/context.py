"""
qash.runtime.context — per-invocation identity passed to the ledger.

Each public ledger operation receives an `InvocationContext` carrying the
caller, the contract creator, and the event sink for this invocation. Nothing
here is global, so tests can supply arbitrary callers without a real host.

Design notes
------------
- Addresses are opaque, fixed-size raw bytes (ADDRESS_SIZE = 35). The core
  never interprets their contents; equality is byte-wise.
- Hex strings (with or without "0x") are accepted by helpers and normalized to
  bytes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from ..errors import InvalidArgument
from .events import EventSink, MemoryEventSink

ADDRESS_SIZE = 35

BytesLike = Union[bytes, bytearray, memoryview, str]


# ----------------------------- helpers ----------------------------- #


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: BytesLike) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise InvalidArgument(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise InvalidArgument(f"invalid hex string: {value!r}") from e
    raise InvalidArgument(f"cannot convert type {type(value).__name__} to bytes")


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def require_address(value: BytesLike, name: str = "address") -> bytes:
    """Normalize `value` to a 35-byte address or abort with InvalidArgument."""
    b = to_bytes(value)
    if len(b) != ADDRESS_SIZE:
        raise InvalidArgument(
            f"{name} must be {ADDRESS_SIZE} bytes, got {len(b)}", name=name
        )
    return b


# ----------------------------- model ------------------------------ #


@dataclass(frozen=True)
class InvocationContext:
    """
    Identity and notification target for one invocation.

    Fields
    ------
    caller:   Identity invoking the current operation.
    creator:  Identity that originally deployed the contract (defaults to the
              caller, which is what a deploy-time `init` sees).
    events:   Sink receiving the invocation's events in emission order.
    """
    caller: bytes
    creator: Optional[bytes] = None
    events: EventSink = field(default_factory=MemoryEventSink, compare=False)

    def __post_init__(self) -> None:
        caller = require_address(self.caller, "caller")
        object.__setattr__(self, "caller", caller)
        creator = caller if self.creator is None else require_address(self.creator, "creator")
        object.__setattr__(self, "creator", creator)

    def caller_is_creator(self) -> bool:
        return self.caller == self.creator


__all__ = [
    "ADDRESS_SIZE",
    "BytesLike",
    "to_bytes",
    "to_hex",
    "require_address",
    "InvocationContext",
]
