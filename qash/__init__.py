"""
QASH fungible-token ledger (qash) — package marker and public entrypoints.

A small, stable façade over the ledger core and its host runtime:

- QashToken(storage, config)         the public operation surface
- LedgerConfig / get_config()         variant flags and token metadata
- LedgerRunner(creator=...)          call functions by name, one atomic
                                     invocation per call
- Abort and its subclasses            the abort taxonomy

Storage, journal, events and the host driver live in `qash.runtime`.
"""

from __future__ import annotations

from .version import __version__
from .config import LedgerConfig, get_config, load_config
from .errors import Abort
from .ledger import QashToken
from .runner import LedgerRunner


def version() -> str:
    """Return the qash version string."""
    return __version__


__all__ = [
    "__version__",
    "version",
    "LedgerConfig",
    "get_config",
    "load_config",
    "Abort",
    "QashToken",
    "LedgerRunner",
]
