"""
ABI table and dispatch for the QASH ledger.

The surface is deliberately small and mirrors the ledger's two argument types:
  - address (35 raw bytes; accepted as bytes, "0x"-hex or bare hex)
  - u64     (accepted as int, decimal string or "0x"-hex string)

`dispatch` resolves a function name against the table for the active variant,
coerces the positional arguments and calls the matching `QashToken` method.
Argument problems surface as `InvalidArgument`, unknown names as
`UnknownFunction`, so a bad call reverts like any other ledger failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import LedgerConfig
from .errors import InvalidArgument, UnknownFunction
from .ledger.contract import QashToken
from .ledger.safe_uint import U64_MAX
from .runtime.context import InvocationContext, require_address, to_hex

__all__ = [
    "ADDRESS",
    "U8",
    "U64",
    "BOOL",
    "FunctionSpec",
    "FUNCTIONS",
    "coerce_u64",
    "coerce_arg",
    "exported_functions",
    "lookup",
    "dispatch",
    "encode_return",
]

# ──────────────────────────────────────────────────────────────────────────────
# Types
# ──────────────────────────────────────────────────────────────────────────────

ADDRESS = "address"
U8 = "u8"
U64 = "u64"
BOOL = "bool"


@dataclass(frozen=True)
class FunctionSpec:
    """One exported ledger function."""

    name: str
    inputs: Tuple[Tuple[str, str], ...] = ()
    output: Optional[str] = None
    mutating: bool = False
    legacy_only: bool = False
    # Trailing inputs that may be omitted (e.g. memo defaults to 0).
    optional: int = 0

    @property
    def min_args(self) -> int:
        return len(self.inputs) - self.optional

    @property
    def max_args(self) -> int:
        return len(self.inputs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "inputs": [{"name": n, "type": t} for n, t in self.inputs],
            "output": self.output,
            "mutating": self.mutating,
        }


FUNCTIONS: Tuple[FunctionSpec, ...] = (
    FunctionSpec("init", (("initial_supply", U64),), mutating=True),
    FunctionSpec("mint", (("amount", U64),), mutating=True, legacy_only=True),
    FunctionSpec("is_initialized", (), output=BOOL),
    FunctionSpec("get_owner", (), output=ADDRESS),
    FunctionSpec("change_owner", (("new_owner", ADDRESS),), mutating=True),
    FunctionSpec("is_paused", (), output=BOOL),
    FunctionSpec("pause", (), mutating=True),
    FunctionSpec("unpause", (), mutating=True),
    FunctionSpec("get_balance", (("address", ADDRESS),), output=U64),
    FunctionSpec(
        "transfer",
        (("to", ADDRESS), ("value", U64), ("memo", U64)),
        mutating=True,
        optional=1,
    ),
    FunctionSpec("get_allowance", (("owner", ADDRESS), ("spender", ADDRESS)), output=U64),
    FunctionSpec("approve", (("spender", ADDRESS), ("value", U64)), mutating=True),
    FunctionSpec(
        "transfer_from",
        (("from", ADDRESS), ("to", ADDRESS), ("value", U64), ("memo", U64)),
        mutating=True,
        optional=1,
    ),
    FunctionSpec("get_decimals", (), output=U8),
    FunctionSpec("get_symbol", (), output=U64),
    FunctionSpec("get_total_supply", (), output=U64),
)

_BY_NAME: Dict[str, FunctionSpec] = {f.name: f for f in FUNCTIONS}

# ──────────────────────────────────────────────────────────────────────────────
# Coercion
# ──────────────────────────────────────────────────────────────────────────────


def coerce_u64(value: Any, *, name: str = "value") -> int:
    """Accept an int, a decimal string or a 0x-hex string in [0, 2**64-1]."""
    if isinstance(value, bool):
        raise InvalidArgument(f"{name} must be an integer, not bool", name=name)
    if isinstance(value, int):
        n = value
    elif isinstance(value, str):
        s = value.strip().replace("_", "")
        try:
            n = int(s, 16) if s.lower().startswith("0x") else int(s, 10)
        except ValueError:
            raise InvalidArgument(f"{name} is not an integer: {value!r}", name=name) from None
    else:
        raise InvalidArgument(f"{name} must be an integer", name=name)
    if not (0 <= n <= U64_MAX):
        raise InvalidArgument(f"{name} outside u64 range", name=name)
    return n


def coerce_arg(typ: str, value: Any, *, name: str = "arg") -> Any:
    if typ == ADDRESS:
        return require_address(value, name)
    if typ == U64:
        return coerce_u64(value, name=name)
    raise ValueError(f"unsupported ABI argument type: {typ!r}")


# ──────────────────────────────────────────────────────────────────────────────
# Table lookups
# ──────────────────────────────────────────────────────────────────────────────


def exported_functions(config: Optional[LedgerConfig] = None) -> List[FunctionSpec]:
    """Functions callable under `config` (legacy-only ones need the legacy bootstrap)."""
    cfg = config or LedgerConfig()
    return [f for f in FUNCTIONS if not (f.legacy_only and cfg.require_explicit_init)]


def lookup(name: str, config: Optional[LedgerConfig] = None) -> FunctionSpec:
    spec = _BY_NAME.get(name)
    cfg = config or LedgerConfig()
    if spec is None or (spec.legacy_only and cfg.require_explicit_init):
        raise UnknownFunction(f"function not exported: {name!r}", function=name)
    return spec


# ──────────────────────────────────────────────────────────────────────────────
# Dispatch
# ──────────────────────────────────────────────────────────────────────────────


def dispatch(token: QashToken, ctx: InvocationContext, name: str, args: Sequence[Any] = ()) -> Any:
    """
    Coerce `args` against the table entry for `name` and invoke it on `token`.
    """
    spec = lookup(name, token.config)
    if not (spec.min_args <= len(args) <= spec.max_args):
        raise InvalidArgument(
            f"{name} takes {spec.min_args}..{spec.max_args} argument(s), got {len(args)}",
            name=name,
        )
    coerced = [coerce_arg(typ, v, name=arg) for (arg, typ), v in zip(spec.inputs, args)]
    fn = getattr(token, spec.name)
    return fn(ctx, *coerced)


def encode_return(value: Any) -> Any:
    """JSON-friendly form of a return value (bytes as 0x-hex)."""
    if isinstance(value, (bytes, bytearray)):
        return to_hex(value)
    return value
