# -*- coding: utf-8 -*-
"""
qash.tests.conftest
===================

Shared fixtures for the ledger test-suite.

- **Deterministic identities**: 35-byte addresses derived from a tag with
  SHA3-256, so failures are reproducible and readable (``alice``, ``bob``...).
- **Hypothesis profiles** (dev/ci/fast) selected by HYPOTHESIS_PROFILE, or
  "ci" when the CI env var is truthy.
- **Runners**: a fresh in-memory `LedgerRunner` per test, for the canonical
  and the legacy variant, plus an already-initialized canonical ledger.

Usage (inside a test file):
    def test_move(ledger, alice, bob):
        assert ledger.call(alice, "transfer", bob, 10).ok
        assert ledger.view("get_balance", bob) == 10
"""
from __future__ import annotations

import hashlib
import os
from typing import Callable, Tuple

import pytest
from hypothesis import HealthCheck, Verbosity, settings

from qash.config import LedgerConfig
from qash.ledger.contract import QashToken
from qash.runner import LedgerRunner
from qash.runtime.context import ADDRESS_SIZE, InvocationContext
from qash.runtime.events import MemoryEventSink
from qash.runtime.storage import MemoryStorage

# --- stable env for tests -----------------------------------------------------

os.environ.setdefault("PYTHONHASHSEED", "0")

INITIAL_SUPPLY = 1_000_000

# --- hypothesis profiles ------------------------------------------------------


def _hc(*items: HealthCheck) -> Tuple[HealthCheck, ...]:
    return items


settings.register_profile(
    "dev",
    settings(
        max_examples=100,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.filter_too_much),
        verbosity=Verbosity.normal,
    ),
)
settings.register_profile(
    "ci",
    settings(
        max_examples=200,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.filter_too_much),
        verbosity=Verbosity.verbose,
        derandomize=True,
    ),
)
settings.register_profile(
    "fast",
    settings(max_examples=25, deadline=None, suppress_health_check=_hc(HealthCheck.too_slow)),
)


def _env_truthy(name: str) -> bool:
    v = os.getenv(name)
    return (v or "").lower() not in ("", "0", "false", "no", "off")


settings.load_profile(os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev"))

# --- deterministic identities -------------------------------------------------


def det_address(tag: str) -> bytes:
    """
    Stable ADDRESS_SIZE-byte address from a tag: a SHA3-256 counter stream.
    """
    out = b""
    ctr = 0
    while len(out) < ADDRESS_SIZE:
        m = hashlib.sha3_256()
        m.update(b"qash-test-addr|")
        m.update(tag.encode("utf-8"))
        m.update(ctr.to_bytes(4, "big"))
        out += m.digest()
        ctr += 1
    return out[:ADDRESS_SIZE]


@pytest.fixture(scope="session")
def make_address() -> Callable[[str], bytes]:
    return det_address


@pytest.fixture(scope="session")
def alice() -> bytes:
    return det_address("alice")


@pytest.fixture(scope="session")
def bob() -> bytes:
    return det_address("bob")


@pytest.fixture(scope="session")
def carol() -> bytes:
    return det_address("carol")


# --- core (no host) -----------------------------------------------------------


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def token(storage: MemoryStorage) -> QashToken:
    """Canonical token bound directly to in-memory storage (no journal)."""
    return QashToken(storage, LedgerConfig())


@pytest.fixture
def ctx_for() -> Callable[..., InvocationContext]:
    """Build an InvocationContext with a fresh event sink."""

    def _make(caller: bytes, creator: bytes = None) -> InvocationContext:  # type: ignore[assignment]
        return InvocationContext(caller=caller, creator=creator, events=MemoryEventSink())

    return _make


# --- runners (through the host) ----------------------------------------------


@pytest.fixture
def runner(alice: bytes) -> LedgerRunner:
    """Fresh canonical ledger, not yet initialized; alice is the creator."""
    return LedgerRunner(MemoryStorage(), LedgerConfig(), creator=alice)


@pytest.fixture
def ledger(runner: LedgerRunner, alice: bytes) -> LedgerRunner:
    """Canonical ledger initialized by alice with INITIAL_SUPPLY."""
    runner.call(alice, "init", INITIAL_SUPPLY).unwrap()
    return runner


@pytest.fixture
def legacy_runner(alice: bytes) -> LedgerRunner:
    """Fresh legacy-variant ledger; alice is the creator."""
    return LedgerRunner(MemoryStorage(), LedgerConfig.legacy(), creator=alice)
