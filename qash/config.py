"""
qash.config — variant flags and token metadata for the ledger core.

Two historical contract variants are served by one parameterized core; the
flags below select which behaviour a deployment gets. Defaults describe the
canonical variant (explicit once-only `init`, strict pause state machine, memo
carried on transfers).

Configuration may be provided via environment variables. Safe defaults are
chosen so a local run works out of the box.

Environment variables (all optional):
  QASH_REQUIRE_EXPLICIT_INIT     -> 0/1/true/false (default: 1)
  QASH_ALLOW_DOUBLE_PAUSE_NOOP   -> 0/1/true/false (default: 0)
  QASH_MEMO_FIELD_PRESENT        -> 0/1/true/false (default: 1)
  QASH_DECIMALS                  -> integer in [0, 255] (default: 6)
  QASH_SYMBOL                    -> 1..8 printable ASCII bytes (default: QASH)

Programmatic usage:
    from qash.config import get_config
    cfg = get_config()
    if not cfg.require_explicit_init:
        ...
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, replace
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

# ----------------------------- constants -----------------------------------

DEFAULT_DECIMALS = 6
DEFAULT_SYMBOL = b"QASH"
SYMBOL_MAX_BYTES = 8

# ----------------------------- helpers -------------------------------------


_BOOL_TRUE = {"1", "true", "t", "yes", "y", "on"}
_BOOL_FALSE = {"0", "false", "f", "no", "n", "off"}


def _bool_env(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    v = value.strip().lower()
    if v in _BOOL_TRUE:
        return True
    if v in _BOOL_FALSE:
        return False
    return default


def _int_env(value: Optional[str], default: int, *, min_v: int, max_v: int) -> int:
    if value is None:
        return default
    try:
        v = int(value.strip(), 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def is_valid_symbol(sym: bytes) -> bool:
    """True iff `sym` is 1..8 printable ASCII bytes."""
    if not isinstance(sym, (bytes, bytearray)) or not (1 <= len(sym) <= SYMBOL_MAX_BYTES):
        return False
    return all(32 <= b <= 126 for b in sym)


def _symbol_env(value: Optional[str], default: bytes) -> bytes:
    if value is None:
        return default
    try:
        sym = value.strip().encode("ascii")
    except UnicodeEncodeError:
        return default
    return sym if is_valid_symbol(sym) else default


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class LedgerConfig:
    # Variant flags
    require_explicit_init: bool = True
    allow_double_pause_noop: bool = False
    memo_field_present: bool = True

    # Token metadata (fixed per deployment)
    decimals: int = DEFAULT_DECIMALS
    symbol: bytes = DEFAULT_SYMBOL

    def __post_init__(self) -> None:
        if not isinstance(self.decimals, int) or not (0 <= self.decimals <= 255):
            raise ValueError("decimals must be an integer in [0, 255]")
        if not is_valid_symbol(self.symbol):
            raise ValueError("symbol must be 1..8 printable ASCII bytes")
        object.__setattr__(self, "symbol", bytes(self.symbol))

    @classmethod
    def legacy(cls, **overrides: Any) -> "LedgerConfig":
        """
        Preset for the legacy variant: owner bootstrapped by the creator's first
        `mint`, idempotent pause/unpause, no memo on transfers.
        """
        base = cls(
            require_explicit_init=False,
            allow_double_pause_noop=True,
            memo_field_present=False,
        )
        return replace(base, **overrides) if overrides else base

    @property
    def variant(self) -> str:
        canonical = (
            self.require_explicit_init
            and not self.allow_double_pause_noop
            and self.memo_field_present
        )
        return "canonical" if canonical else "custom" if self.require_explicit_init else "legacy"

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["symbol"] = self.symbol.decode("ascii")
        d["variant"] = self.variant
        return d


def load_config(env: Optional[Mapping[str, str]] = None) -> LedgerConfig:
    """
    Build a LedgerConfig from environment variables (or a supplied mapping).
    Unparseable values fall back to defaults; integers are clamped.
    """
    e = os.environ if env is None else env
    return LedgerConfig(
        require_explicit_init=_bool_env(e.get("QASH_REQUIRE_EXPLICIT_INIT"), True),
        allow_double_pause_noop=_bool_env(e.get("QASH_ALLOW_DOUBLE_PAUSE_NOOP"), False),
        memo_field_present=_bool_env(e.get("QASH_MEMO_FIELD_PRESENT"), True),
        decimals=_int_env(e.get("QASH_DECIMALS"), DEFAULT_DECIMALS, min_v=0, max_v=255),
        symbol=_symbol_env(e.get("QASH_SYMBOL"), DEFAULT_SYMBOL),
    )


@lru_cache(maxsize=1)
def get_config() -> LedgerConfig:
    """Process-wide config resolved once from the environment."""
    return load_config()


__all__ = [
    "DEFAULT_DECIMALS",
    "DEFAULT_SYMBOL",
    "SYMBOL_MAX_BYTES",
    "LedgerConfig",
    "is_valid_symbol",
    "load_config",
    "get_config",
]
