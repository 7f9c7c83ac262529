"""
qash.runtime.host — the invocation driver: one atomic unit per call.

Responsibilities
- execute: run one invocation body against a fresh write journal over the base
  storage and a private event buffer. On success the journal is committed and
  the buffered events are forwarded to the host sink in emission order. On an
  `Abort` both are discarded and the failure is reported as a REVERT result.
- Any other exception is a host/programming error: state is still rolled back,
  then the exception propagates.

The driver knows nothing about the ledger; it only needs a callable taking
``(storage, ctx)``. Invocations are applied one at a time, in call order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from ..errors import Abort, error_to_result_fields
from .context import BytesLike, InvocationContext, require_address, to_hex
from .events import Event, EventSink, MemoryEventSink, events_for_receipt
from .journal import Journal
from .storage import MemoryStorage, StorageCapability

log = logging.getLogger(__name__)

Body = Callable[[StorageCapability, InvocationContext], Any]


class InvocationStatus(str, Enum):
    SUCCESS = "success"
    REVERT = "revert"

    @property
    def code(self) -> str:
        """Uppercase code form, e.g., 'SUCCESS' / 'REVERT'."""
        return self.value.upper()

    @property
    def is_success(self) -> bool:
        return self is InvocationStatus.SUCCESS

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value

    @classmethod
    def from_str(cls, s: str) -> "InvocationStatus":
        norm = (s or "").strip().lower()
        if norm in {"success", "ok", "s", "passed"}:
            return cls.SUCCESS
        if norm in {"revert", "rv", "failed", "fail", "abort"}:
            return cls.REVERT
        raise ValueError(f"unknown InvocationStatus: {s!r}")


def _json_value(v: Any) -> Any:
    if isinstance(v, (bytes, bytearray)):
        return to_hex(v)
    return v


@dataclass(frozen=True)
class InvocationResult:
    """
    Outcome of one invocation.

    status:   SUCCESS / REVERT
    value:    return value of the operation (None on REVERT)
    events:   events committed by this invocation (empty on REVERT)
    error:    the Abort that ended the invocation, if any
    function: label of the invoked operation (for logs/CLI)
    """

    status: InvocationStatus
    value: Any = None
    events: Tuple[Event, ...] = ()
    error: Optional[Abort] = None
    function: str = ""

    @property
    def ok(self) -> bool:
        return self.status.is_success

    def unwrap(self) -> Any:
        """Return `value`, or raise the recorded Abort."""
        if self.error is not None:
            raise self.error
        return self.value

    def event_names(self) -> Tuple[str, ...]:
        return tuple(ev.name for ev in self.events)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "function": self.function,
            "status": self.status.code,
            "return": _json_value(self.value),
            "events": [ce.to_dict() for ce in events_for_receipt(self.events)],
        }
        if self.error is not None:
            out.update(error_to_result_fields(self.error))
        return out


@dataclass
class Host:
    """
    Minimal in-process host: base storage, creator identity, and event sink.
    """

    creator: bytes
    storage: StorageCapability = field(default_factory=MemoryStorage)
    sink: EventSink = field(default_factory=MemoryEventSink)

    def __post_init__(self) -> None:
        self.creator = require_address(self.creator, "creator")

    def execute(self, caller: BytesLike, body: Body, *, function: str = "call") -> InvocationResult:
        journal = Journal(self.storage)
        buffer = MemoryEventSink()

        try:
            ctx = InvocationContext(caller=caller, creator=self.creator, events=buffer)
            value = body(journal, ctx)
        except Abort as err:
            journal.revert()
            log.info("%s reverted: %s", function, err.code)
            return InvocationResult(
                status=InvocationStatus.REVERT,
                error=err,
                function=function,
            )
        except Exception:
            journal.revert()
            log.exception("%s failed with a host error; state rolled back", function)
            raise

        staged = journal.pending_writes()
        journal.commit()
        events = tuple(buffer.events)
        for ev in events:
            self.sink.emit(ev)
        log.debug("%s committed: %d write(s), %d event(s)", function, staged, len(events))
        return InvocationResult(
            status=InvocationStatus.SUCCESS,
            value=value,
            events=events,
            function=function,
        )


__all__ = [
    "Body",
    "InvocationStatus",
    "InvocationResult",
    "Host",
]
