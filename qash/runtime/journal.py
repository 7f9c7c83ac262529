"""
qash.runtime.journal — journaling writes over a storage capability.

This module provides a deterministic, in-memory write journal layered over any
`StorageCapability`. It supports nested checkpoints via a stack of overlays.
Writes go to the top overlay; reads consult overlays from top → base.
`commit()` merges the top overlay into the next layer (or the base storage if
it's the last layer). `revert()` discards the top overlay.

The journal is itself a storage capability, so the ledger core runs against it
unchanged; the host decides afterwards whether the invocation's writes reach
the base.

Intended usage
--------------
    j = Journal(base)
    j.begin()                 # start a checkpoint
    j.set(key, b"value")
    j.commit()                # apply to parent/base

Key properties
--------------
- Pure Python, no I/O.
- Base storage is never written until the outermost commit.
- Deterministic: base writes are applied in sorted key order.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .storage import StorageCapability

log = logging.getLogger(__name__)


class Journal(StorageCapability):
    """
    A copy-on-write write journal with nested checkpoints.

    API highlights
    --------------
    - begin() / commit() / revert()
    - get(), set(), size()  (the storage capability)
    """

    def __init__(self, base: StorageCapability) -> None:
        self._base = base
        # Start with a single empty overlay for convenience.
        self._layers: List[Dict[bytes, bytes]] = [{}]

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        """Number of overlays (>= 1)."""
        return len(self._layers)

    def begin(self) -> int:
        """Start a new checkpoint. Returns the new depth marker (int)."""
        self._layers.append({})
        return len(self._layers)

    def commit(self) -> None:
        """
        Commit the top overlay into its parent, or into the base storage when
        only the root layer remains.
        """
        top = self._layers.pop()
        if self._layers:
            self._layers[-1].update(top)
            return
        self._apply_to_base(top)
        # Keep a fresh root layer for further journaling.
        self._layers.append({})

    def revert(self) -> None:
        """Discard the top overlay (or clear it if it's the root)."""
        if len(self._layers) > 1:
            dropped = self._layers.pop()
        else:
            dropped = self._layers[0]
            self._layers[0] = {}
        log.debug("journal revert: dropped %d staged write(s)", len(dropped))

    # --------------------------------------------------------------------- #
    # Storage capability
    # --------------------------------------------------------------------- #

    def get(self, key: bytes) -> Optional[bytes]:
        k = bytes(key)
        for layer in reversed(self._layers):
            if k in layer:
                return layer[k]
        return self._base.get(k)

    def set(self, key: bytes, value: bytes) -> None:
        if not isinstance(key, (bytes, bytearray)) or len(key) == 0:
            raise ValueError("storage key must be non-empty bytes")
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError("storage value must be bytes")
        self._layers[-1][bytes(key)] = bytes(value)

    def size(self, key: bytes) -> int:
        k = bytes(key)
        for layer in reversed(self._layers):
            if k in layer:
                return len(layer[k])
        return self._base.size(k)

    # --------------------------------------------------------------------- #
    # Internal apply / introspection
    # --------------------------------------------------------------------- #

    def _apply_to_base(self, layer: Dict[bytes, bytes]) -> None:
        for k in sorted(layer):
            self._base.set(k, layer[k])
        log.debug("journal commit: applied %d write(s) to base", len(layer))

    def pending_writes(self) -> int:
        """Total number of staged (key) entries across layers."""
        return sum(len(layer) for layer in self._layers)


__all__ = ["Journal"]
