"""
qash.runtime.storage — the host-provided key/value storage capability.

The ledger core never touches a global store: every operation receives a
capability object that satisfies `StorageCapability`. Two backends ship here:

- MemoryStorage:   in-process dict, for tests and simulations.
- JsonFileStorage: MemoryStorage persisted as a hex-encoded JSON map; used by
                   the CLI so that successive invocations share state.

Capability API
--------------
- get(key: bytes) -> Optional[bytes]     # None when absent
- set(key: bytes, value: bytes) -> None  # overwrite
- size(key: bytes) -> int                # 0 <=> absent (or empty)

Keys and values are raw bytes. Width checks on the *contents* of values belong
to the ledger layer; this module only enforces that keys are non-empty bytes.
"""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Dict, Iterator, Optional, Protocol, Tuple, Union, runtime_checkable


# ---------------------------- Capability API ---------------------------- #


@runtime_checkable
class StorageCapability(Protocol):
    """Minimal storage interface injected into every ledger operation."""

    def get(self, key: bytes) -> Optional[bytes]: ...
    def set(self, key: bytes, value: bytes) -> None: ...
    def size(self, key: bytes) -> int: ...


def _check_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray)):
        raise TypeError(f"storage key must be bytes, got {type(key).__name__}")
    if len(key) == 0:
        raise ValueError("storage key must be non-empty")
    return bytes(key)


def _check_value(value: bytes) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise TypeError(f"storage value must be bytes, got {type(value).__name__}")
    return bytes(value)


# ------------------------------ Backends ------------------------------ #


class MemoryStorage(StorageCapability):
    """Thread-safe in-memory backend for local runs and tests."""

    def __init__(self, initial: Optional[Dict[bytes, bytes]] = None) -> None:
        self._store: Dict[bytes, bytes] = {}
        self._lock = threading.RLock()
        for k, v in (initial or {}).items():
            self._store[_check_key(k)] = _check_value(v)

    def get(self, key: bytes) -> Optional[bytes]:
        k = _check_key(key)
        with self._lock:
            return self._store.get(k)

    def set(self, key: bytes, value: bytes) -> None:
        k = _check_key(key)
        v = _check_value(value)
        with self._lock:
            self._store[k] = v

    def size(self, key: bytes) -> int:
        k = _check_key(key)
        with self._lock:
            v = self._store.get(k)
            return 0 if v is None else len(v)

    # Introspection (not part of the capability) ------------------------- #

    def items(self, prefix: bytes = b"") -> Iterator[Tuple[bytes, bytes]]:
        """Iterate (key, value) pairs whose key starts with `prefix`, sorted by key."""
        with self._lock:
            snapshot = sorted(self._store.items())
        for k, v in snapshot:
            if k.startswith(prefix):
                yield k, v

    def snapshot(self) -> Dict[bytes, bytes]:
        """Return a copy of the whole store."""
        with self._lock:
            return dict(self._store)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def export_hex(self) -> Dict[str, str]:
        """Hex-encoded view, stable key order."""
        return {"0x" + k.hex(): "0x" + v.hex() for k, v in self.items()}


def _h2b(h: str) -> bytes:
    if not isinstance(h, str):
        raise TypeError("expected hex string")
    if h.startswith(("0x", "0X")):
        h = h[2:]
    return bytes.fromhex(h)


class JsonFileStorage(MemoryStorage):
    """
    MemoryStorage backed by a JSON file of the form:

        {"storage": {"0x<key>": "0x<value>", ...}}

    The file is read once at construction; a malformed file raises ValueError
    (json.JSONDecodeError included). `flush()` rewrites it atomically (write to
    a sibling temp file, then replace).
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        initial: Dict[bytes, bytes] = {}
        if self.path.is_file():
            doc = json.loads(self.path.read_text(encoding="utf-8") or "{}")
            if not isinstance(doc, dict):
                raise ValueError(f"{self.path}: state file must be a JSON object")
            slots = doc.get("storage") or {}
            if not isinstance(slots, dict):
                raise ValueError(f"{self.path}: 'storage' must map hex keys to hex values")
            for k, v in slots.items():
                try:
                    initial[_h2b(k)] = _h2b(v)
                except TypeError as e:
                    raise ValueError(f"{self.path}: slot {k!r}: {e}") from e
        super().__init__(initial)

    def flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(
            json.dumps({"storage": self.export_hex()}, indent=2, sort_keys=True) + "\n",
            encoding="utf-8",
        )
        os.replace(tmp, self.path)


__all__ = [
    "StorageCapability",
    "MemoryStorage",
    "JsonFileStorage",
]
