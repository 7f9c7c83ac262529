"""
qash.errors — the single abort taxonomy of the token ledger.

Every failure inside a ledger operation is an `Abort`: it terminates the current
invocation and the host guarantees that no write and no event of that invocation
survives. Subclasses carry a stable machine code that higher layers (CLI, result
envelopes, logs) can rely on.

Hierarchy
---------
Abort (base)
 ├─ Overflow                : checked addition exceeded the u64 range
 ├─ Underflow               : checked subtraction went below zero
 ├─ InsufficientBalance     : debit larger than the account balance
 ├─ InsufficientAllowance   : transfer_from larger than the approved allowance
 ├─ Unauthorized            : owner-gated call from a non-owner
 ├─ Paused                  : transfer attempted while the ledger is paused
 ├─ InvalidStateTransition  : pause while paused / unpause while active
 ├─ AlreadyInitialized      : second `init`
 ├─ InvalidArgument         : malformed address, value outside u64, bad arity
 ├─ CorruptState            : stored value has an impossible width
 ├─ Unsupported             : operation disabled by the active configuration
 └─ UnknownFunction         : ABI dispatch of a name the variant does not export

These classes import nothing from the rest of the package so that every layer
(key derivation, arithmetic, host driver) can raise them without cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Abort(Exception):
    """
    Base ledger error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g. 'OVERFLOW', 'PAUSED').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "aborted"
    code: str = "ABORT"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for results and CLI output."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


class Overflow(Abort):
    """Checked addition would exceed 2**64 - 1."""
    CODE = "OVERFLOW"

    def __init__(self, message: str = "u64 overflow", *, a: Optional[int] = None,
                 b: Optional[int] = None, data: Optional[Dict[str, Any]] = None):
        d: Dict[str, Any] = dict(data or {})
        if a is not None:
            d.setdefault("a", a)
        if b is not None:
            d.setdefault("b", b)
        super().__init__(message=message, code=self.CODE, data=d or None)


class Underflow(Abort):
    """Checked subtraction with b > a."""
    CODE = "UNDERFLOW"

    def __init__(self, message: str = "u64 underflow", *, a: Optional[int] = None,
                 b: Optional[int] = None, data: Optional[Dict[str, Any]] = None):
        d: Dict[str, Any] = dict(data or {})
        if a is not None:
            d.setdefault("a", a)
        if b is not None:
            d.setdefault("b", b)
        super().__init__(message=message, code=self.CODE, data=d or None)


class InsufficientBalance(Abort):
    CODE = "INSUFFICIENT_BALANCE"

    def __init__(self, message: str = "insufficient balance", *, balance: Optional[int] = None,
                 value: Optional[int] = None, data: Optional[Dict[str, Any]] = None):
        d: Dict[str, Any] = dict(data or {})
        if balance is not None:
            d.setdefault("balance", balance)
        if value is not None:
            d.setdefault("value", value)
        super().__init__(message=message, code=self.CODE, data=d or None)


class InsufficientAllowance(Abort):
    CODE = "INSUFFICIENT_ALLOWANCE"

    def __init__(self, message: str = "insufficient allowance", *, allowance: Optional[int] = None,
                 value: Optional[int] = None, data: Optional[Dict[str, Any]] = None):
        d: Dict[str, Any] = dict(data or {})
        if allowance is not None:
            d.setdefault("allowance", allowance)
        if value is not None:
            d.setdefault("value", value)
        super().__init__(message=message, code=self.CODE, data=d or None)


class Unauthorized(Abort):
    """Owner-gated call from a caller that is not the stored owner."""
    CODE = "UNAUTHORIZED"

    def __init__(self, message: str = "caller is not the owner", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code=self.CODE, data=data)


class Paused(Abort):
    CODE = "PAUSED"

    def __init__(self, message: str = "ledger is paused", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code=self.CODE, data=data)


class InvalidStateTransition(Abort):
    """
    Pause state machine misuse: `pause` while Paused or `unpause` while Active.
    """
    CODE = "INVALID_STATE_TRANSITION"

    def __init__(self, message: str = "invalid pause state transition", *,
                 state: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        d: Dict[str, Any] = dict(data or {})
        if state is not None:
            d.setdefault("state", state)
        super().__init__(message=message, code=self.CODE, data=d or None)


class AlreadyInitialized(Abort):
    CODE = "ALREADY_INITIALIZED"

    def __init__(self, message: str = "already initialized", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code=self.CODE, data=data)


class InvalidArgument(Abort):
    """
    Malformed input at the operation boundary (address width, u64 range, arity).
    """
    CODE = "INVALID_ARGUMENT"

    def __init__(self, message: str = "invalid argument", *, name: Optional[str] = None,
                 data: Optional[Dict[str, Any]] = None):
        d: Dict[str, Any] = dict(data or {})
        if name is not None:
            d.setdefault("name", name)
        super().__init__(message=message, code=self.CODE, data=d or None)


class CorruptState(Abort):
    CODE = "CORRUPT_STATE"

    def __init__(self, message: str = "stored value is malformed", *, key: Optional[str] = None,
                 data: Optional[Dict[str, Any]] = None):
        d: Dict[str, Any] = dict(data or {})
        if key is not None:
            d.setdefault("key", key)
        super().__init__(message=message, code=self.CODE, data=d or None)


class Unsupported(Abort):
    CODE = "UNSUPPORTED"

    def __init__(self, message: str = "operation disabled by configuration", *,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code=self.CODE, data=data)


class UnknownFunction(Abort):
    CODE = "UNKNOWN_FUNCTION"

    def __init__(self, message: str = "unknown function", *, function: Optional[str] = None,
                 data: Optional[Dict[str, Any]] = None):
        d: Dict[str, Any] = dict(data or {})
        if function is not None:
            d.setdefault("function", function)
        super().__init__(message=message, code=self.CODE, data=d or None)


# -------- helper utilities ----------------------------------------------------


def error_to_result_fields(err: Abort) -> Dict[str, Any]:
    """
    Map an Abort to canonical result fields:

        {"status": "REVERT", "error": {code, message, data?}}
    """
    return {"status": "REVERT", "error": err.to_dict()}


__all__ = [
    "Abort",
    "Overflow",
    "Underflow",
    "InsufficientBalance",
    "InsufficientAllowance",
    "Unauthorized",
    "Paused",
    "InvalidStateTransition",
    "AlreadyInitialized",
    "InvalidArgument",
    "CorruptState",
    "Unsupported",
    "UnknownFunction",
    "error_to_result_fields",
]
