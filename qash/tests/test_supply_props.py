# -*- coding: utf-8 -*-
"""
Property tests: arbitrary sequences of ledger calls (valid or not) never break
``sum(balances) == total_supply``, and a reverted call never changes storage.
"""
from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from qash.config import LedgerConfig
from qash.runner import LedgerRunner
from qash.runtime.storage import MemoryStorage

from .conftest import det_address

ACCOUNTS = [det_address(t) for t in ("p0", "p1", "p2", "p3")]

acct = st.sampled_from(ACCOUNTS)
amount = st.one_of(st.integers(min_value=0, max_value=2_000), st.sampled_from([2**64 - 1, 2**63]))

step = st.one_of(
    st.tuples(st.just("transfer"), acct, acct, amount, st.integers(0, 9)),
    st.tuples(st.just("approve"), acct, acct, amount),
    st.tuples(st.just("transfer_from"), acct, acct, acct, amount),
    st.tuples(st.just("pause"), acct),
    st.tuples(st.just("unpause"), acct),
    st.tuples(st.just("change_owner"), acct, acct),
    st.tuples(st.just("init"), acct, amount),
)


def _apply(runner: LedgerRunner, s: tuple):
    name = s[0]
    if name == "transfer":
        _, caller, to, v, memo = s
        return runner.call(caller, "transfer", to, v, memo)
    if name == "approve":
        _, caller, spender, v = s
        return runner.call(caller, "approve", spender, v)
    if name == "transfer_from":
        _, spender, src, dst, v = s
        return runner.call(spender, "transfer_from", src, dst, v)
    if name in ("pause", "unpause"):
        return runner.call(s[1], name)
    if name == "change_owner":
        return runner.call(s[1], "change_owner", s[2])
    return runner.call(s[1], "init", s[2])


@given(
    supply=st.integers(min_value=0, max_value=10_000),
    steps=st.lists(step, max_size=40),
    legacy=st.booleans(),
)
def test_supply_is_conserved(supply, steps, legacy):
    cfg = LedgerConfig.legacy() if legacy else LedgerConfig()
    runner = LedgerRunner(MemoryStorage(), cfg, creator=ACCOUNTS[0])
    runner.call(ACCOUNTS[0], "init", supply).unwrap()

    for s in steps:
        before = runner.storage.snapshot()
        res = _apply(runner, s)
        if not res.ok:
            assert runner.storage.snapshot() == before
        assert runner.sum_of_balances() == runner.view("get_total_supply") == supply


@given(st.lists(st.tuples(acct, st.integers(0, 5_000)), max_size=20))
def test_legacy_mints_track_supply(mints):
    runner = LedgerRunner(MemoryStorage(), LedgerConfig.legacy(), creator=ACCOUNTS[0])
    expected = 0
    for caller, v in mints:
        res = runner.call(caller, "mint", v)
        if res.ok:
            expected += v
    assert runner.view("get_total_supply") == expected
    assert runner.sum_of_balances() == expected
