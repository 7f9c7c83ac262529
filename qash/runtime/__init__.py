"""
qash.runtime — host-side collaborators of the ledger core.

- storage:  StorageCapability protocol, MemoryStorage, JsonFileStorage
- journal:  checkpointed write journal over any storage capability
- events:   Event type, EventSink protocol, MemoryEventSink, receipt encoding
- context:  InvocationContext (caller, creator, event sink) and address helpers
- host:     Host driver running each invocation as one atomic unit
"""

from __future__ import annotations

from .context import ADDRESS_SIZE, InvocationContext, require_address, to_bytes, to_hex
from .events import Event, EventSink, MemoryEventSink, events_for_receipt, make_event
from .host import Host, InvocationResult, InvocationStatus
from .journal import Journal
from .storage import JsonFileStorage, MemoryStorage, StorageCapability

__all__ = (
    "ADDRESS_SIZE",
    "InvocationContext",
    "require_address",
    "to_bytes",
    "to_hex",
    "Event",
    "EventSink",
    "MemoryEventSink",
    "events_for_receipt",
    "make_event",
    "Host",
    "InvocationResult",
    "InvocationStatus",
    "Journal",
    "JsonFileStorage",
    "MemoryStorage",
    "StorageCapability",
)
