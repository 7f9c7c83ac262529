from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

MAX_EVENT_NAME_LEN = 64
MAX_KEY_LEN = 64
MAX_INT_BITS = 64  # ledger values are u64

# Keys must be identifier-like: letters/underscore, then letters/digits/underscore.
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class Event:
    """A completed state change, as reported to the host's event sink."""

    name: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CanonicalEvent:
    """
    Canonical event representation for results and CLI output:

        name: event name
        args: sequence of {"k", "t", "v"} dicts
              t="b" => bytes encoded as 0x-prefixed hex
              t="i" => integer
              t="z" => boolean
              t="n" => None
    """

    name: str
    args: Sequence[Mapping[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "args": [dict(a) for a in self.args]}


@runtime_checkable
class EventSink(Protocol):
    """Fire-and-forget notification target, ordered by emission."""

    def emit(self, event: Event) -> None: ...


def make_event(name: str, args: Optional[Mapping[str, Any]] = None) -> Event:
    """Validate and build an Event."""
    if not isinstance(name, str) or not name:
        raise ValueError("event name must be a non-empty str")
    if len(name) > MAX_EVENT_NAME_LEN:
        raise ValueError("event name too long")

    checked: Dict[str, Any] = {}
    for k, v in (args or {}).items():
        if not isinstance(k, str) or not _KEY_RE.match(k) or len(k) > MAX_KEY_LEN:
            raise ValueError(f"invalid event key: {k!r}")
        if isinstance(v, (bytes, bytearray)):
            checked[k] = bytes(v)
        elif isinstance(v, bool) or v is None:
            # bool is a subclass of int, so check it before int.
            checked[k] = v
        elif isinstance(v, int):
            if v < 0 or v.bit_length() > MAX_INT_BITS:
                raise ValueError(f"event int arg {k!r} out of range")
            checked[k] = v
        else:
            raise TypeError(f"unsupported event arg type for {k!r}: {type(v).__name__}")
    return Event(name, checked)


class MemoryEventSink(EventSink):
    """In-memory sink; keeps every event in emission order."""

    def __init__(self) -> None:
        self._events: List[Event] = []

    def emit(self, event: Event) -> None:
        if not isinstance(event, Event):
            raise TypeError(f"expected Event, got {type(event).__name__}")
        self._events.append(event)

    def extend(self, events: Iterable[Event]) -> None:
        for ev in events:
            self.emit(ev)

    def clear(self) -> None:
        self._events.clear()

    @property
    def events(self) -> List[Event]:
        return list(self._events)

    def names(self) -> List[str]:
        return [ev.name for ev in self._events]

    def __len__(self) -> int:
        return len(self._events)


def canonical_event(ev: Event) -> CanonicalEvent:
    enc_args: List[Dict[str, Any]] = []
    for k, v in ev.args.items():
        if isinstance(v, (bytes, bytearray)):
            enc_args.append({"k": k, "t": "b", "v": "0x" + bytes(v).hex()})
        elif isinstance(v, bool):
            enc_args.append({"k": k, "t": "z", "v": v})
        elif isinstance(v, int):
            enc_args.append({"k": k, "t": "i", "v": int(v)})
        elif v is None:
            enc_args.append({"k": k, "t": "n", "v": None})
        else:
            raise TypeError(f"unsupported event arg type in receipt: {type(v).__name__}")
    return CanonicalEvent(name=ev.name, args=tuple(enc_args))


def events_for_receipt(events: Iterable[Event]) -> List[CanonicalEvent]:
    """Convert events into their canonical receipt form."""
    return [canonical_event(ev) for ev in events]


__all__ = [
    "Event",
    "CanonicalEvent",
    "EventSink",
    "MemoryEventSink",
    "make_event",
    "canonical_event",
    "events_for_receipt",
    "MAX_EVENT_NAME_LEN",
    "MAX_KEY_LEN",
    "MAX_INT_BITS",
]
