"""
qash.runner — call the ledger by function name through the host driver.

`LedgerRunner` ties the pieces together for scripts, the CLI and tests:

    runner = LedgerRunner(creator=alice)
    runner.call(alice, "init", 1_000_000)
    runner.call(alice, "transfer", bob, 250, 7)
    assert runner.view("get_balance", bob) == 250

Each `call` is one atomic invocation: a fresh `QashToken` is bound to the
host's write journal, the ABI dispatcher coerces the arguments, and the host
either commits (writes + events) or reverts everything on an `Abort`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from . import abi
from .config import LedgerConfig, get_config
from .ledger.contract import QashToken
from .ledger.keys import ALLOWANCES_PREFIX, BALANCES_PREFIX, address_of_balance_key, classify_key
from .ledger.safe_uint import decode_u64
from .runtime.context import ADDRESS_SIZE, BytesLike, InvocationContext, require_address, to_hex
from .runtime.events import Event, EventSink, MemoryEventSink
from .runtime.host import Host, InvocationResult
from .runtime.storage import MemoryStorage, StorageCapability

log = logging.getLogger(__name__)


def check_steps(steps: Iterable[Any]) -> List[Mapping[str, Any]]:
    """
    Validate the shape of script steps: each is an object with a string
    "function", an optional list "args" and an optional "caller". Raises
    ValueError naming the first bad step.
    """
    out: List[Mapping[str, Any]] = []
    for i, step in enumerate(steps):
        if not isinstance(step, Mapping):
            raise ValueError(f"step {i}: expected an object, got {type(step).__name__}")
        if not isinstance(step.get("function"), str):
            raise ValueError(f"step {i}: 'function' must be a string")
        if "args" in step and not isinstance(step["args"], (list, tuple, type(None))):
            raise ValueError(f"step {i}: 'args' must be a list")
        if "caller" in step and not isinstance(step["caller"], (str, bytes, bytearray)):
            raise ValueError(f"step {i}: 'caller' must be an address")
        out.append(step)
    return out


class LedgerRunner:
    """Host + token + ABI in one object."""

    def __init__(
        self,
        storage: Optional[StorageCapability] = None,
        config: Optional[LedgerConfig] = None,
        *,
        creator: BytesLike,
        sink: Optional[EventSink] = None,
    ) -> None:
        self.config = config or get_config()
        self.host = Host(
            creator=require_address(creator, "creator"),
            storage=storage if storage is not None else MemoryStorage(),
            sink=sink if sink is not None else MemoryEventSink(),
        )

    @property
    def storage(self) -> StorageCapability:
        return self.host.storage

    @property
    def creator(self) -> bytes:
        return self.host.creator

    @property
    def sink(self) -> EventSink:
        return self.host.sink

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    def call(self, caller: BytesLike, function: str, *args: Any) -> InvocationResult:
        """Run `function(*args)` as `caller` in its own atomic invocation."""

        def body(storage: StorageCapability, ctx: InvocationContext) -> Any:
            return abi.dispatch(QashToken(storage, self.config), ctx, function, args)

        return self.host.execute(caller, body, function=function)

    def view(self, function: str, *args: Any, caller: Optional[BytesLike] = None) -> Any:
        """
        Call a function and return its value, raising the Abort on revert.
        Views still go through the host, so any event they emit (get_owner)
        reaches the sink.
        """
        return self.call(caller if caller is not None else self.creator, function, *args).unwrap()

    def run_script(self, steps: Iterable[Mapping[str, Any]]) -> List[InvocationResult]:
        """
        Execute a list of ``{"caller", "function", "args"}`` steps in order.
        A reverted step does not stop the script; a malformed one stops it
        before anything runs.
        """
        steps = check_steps(steps)
        results: List[InvocationResult] = []
        for i, step in enumerate(steps):
            caller = step.get("caller", self.creator)
            function = step["function"]
            args = list(step.get("args") or [])
            res = self.call(caller, function, *args)
            log.debug("step %d %s -> %s", i, function, res.status.code)
            results.append(res)
        return results

    # ------------------------------------------------------------------
    # Audits (read base storage directly, outside any invocation)
    # ------------------------------------------------------------------

    def balances(self) -> Dict[bytes, int]:
        """All non-empty balance slots, keyed by raw address."""
        items = getattr(self.storage, "items", None)
        if items is None:
            raise TypeError("storage does not support iteration")
        out: Dict[bytes, int] = {}
        for key, raw in items(BALANCES_PREFIX):
            # Prefix matches of the wrong length are not balance slots.
            if classify_key(key) != "balance":
                continue
            out[address_of_balance_key(key)] = decode_u64(raw, key=key)
        return out

    def sum_of_balances(self) -> int:
        return sum(self.balances().values())

    def state_summary(self) -> Dict[str, Any]:
        """
        Decode every slot of base storage by key class. Keys the ledger never
        writes are listed under "unknown".
        """
        items = getattr(self.storage, "items", None)
        if items is None:
            raise TypeError("storage does not support iteration")
        out: Dict[str, Any] = {
            "owner": None,
            "paused": False,
            "total_supply": 0,
            "balances": {},
            "allowances": [],
            "unknown": [],
        }
        for key, raw in items():
            kind = classify_key(key)
            if kind == "owner":
                out["owner"] = to_hex(raw) if raw else None
            elif kind == "pause":
                out["paused"] = bool(raw) and raw != b"\x00"
            elif kind == "total_supply":
                out["total_supply"] = decode_u64(raw, key=key)
            elif kind == "balance":
                out["balances"][to_hex(address_of_balance_key(key))] = decode_u64(raw, key=key)
            elif kind == "allowance":
                body = key[len(ALLOWANCES_PREFIX):]
                out["allowances"].append(
                    {
                        "owner": to_hex(body[:ADDRESS_SIZE]),
                        "spender": to_hex(body[ADDRESS_SIZE:]),
                        "value": decode_u64(raw, key=key),
                    }
                )
            else:
                out["unknown"].append(to_hex(key))
        return out

    def events(self) -> List[Event]:
        evs = getattr(self.sink, "events", None)
        return list(evs) if evs is not None else []


__all__ = ["LedgerRunner", "check_steps"]
