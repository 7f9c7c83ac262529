# -*- coding: utf-8 -*-
"""
End-to-end flow through the host, one invocation per step:

  A: init(1000)
  A: approve(B, 300)
  B: transfer_from(A, C, 200, memo=7)
  A: pause()    -> A's transfer reverts with PAUSED
  A: unpause()  -> A's transfer succeeds again
"""
from __future__ import annotations

import pytest

from qash.errors import Paused
from qash.ledger.keys import BALANCES_PREFIX
from qash.runner import check_steps


def test_end_to_end(runner, alice, bob, carol):
    A, B, C = alice, bob, carol

    assert runner.call(A, "init", 1000).ok
    assert runner.view("get_balance", A) == 1000
    assert runner.view("get_total_supply") == 1000
    assert runner.view("get_owner") == A

    assert runner.call(A, "approve", B, 300).ok

    res = runner.call(B, "transfer_from", A, C, 200, 7)
    assert res.ok
    assert runner.view("get_balance", A) == 800
    assert runner.view("get_balance", C) == 200
    assert runner.view("get_allowance", A, B) == 100

    recorded = [(e.name, e.args) for e in runner.events()]
    approval = ("Approval", {"owner": A, "spender": B, "value": 300})
    transfer = ("Transfer", {"from": A, "to": C, "value": 200, "memo": 7})
    assert approval in recorded and transfer in recorded
    assert recorded.index(approval) < recorded.index(transfer)

    assert runner.call(A, "pause").ok
    blocked = runner.call(A, "transfer", C, 1, 0)
    assert isinstance(blocked.error, Paused)
    assert runner.view("get_balance", C) == 200

    assert runner.call(A, "unpause").ok
    assert runner.call(A, "transfer", C, 1, 0).ok
    assert runner.view("get_balance", C) == 201
    assert runner.view("get_balance", A) == 799

    assert runner.sum_of_balances() == runner.view("get_total_supply") == 1000


def test_reverted_steps_leave_no_events(runner, alice, bob):
    runner.call(alice, "init", 10).unwrap()
    n = len(runner.events())
    res = runner.call(bob, "transfer", alice, 5)
    assert not res.ok and res.error.code == "INSUFFICIENT_BALANCE"
    assert len(runner.events()) == n


def test_second_init_through_host(ledger, alice, bob):
    before = dict(ledger.storage.snapshot())
    res = ledger.call(bob, "init", 1)
    assert res.error.code == "ALREADY_INITIALIZED"
    assert ledger.storage.snapshot() == before
    assert ledger.view("get_owner") == alice


def test_state_summary_decodes_every_slot(ledger, alice, bob):
    ledger.call(alice, "transfer", bob, 40).unwrap()
    ledger.call(alice, "approve", bob, 9).unwrap()
    ledger.call(alice, "pause").unwrap()

    s = ledger.state_summary()
    assert s["owner"] == "0x" + alice.hex()
    assert s["paused"] is True
    assert s["total_supply"] == 1_000_000
    assert s["balances"] == {"0x" + alice.hex(): 1_000_000 - 40, "0x" + bob.hex(): 40}
    assert s["allowances"] == [{"owner": "0x" + alice.hex(), "spender": "0x" + bob.hex(), "value": 9}]
    assert s["unknown"] == []


def test_run_script_continues_after_revert(runner, alice, bob):
    results = runner.run_script(
        [
            {"caller": alice, "function": "init", "args": [5]},
            {"caller": bob, "function": "transfer", "args": [alice, 1]},
            {"function": "transfer", "args": [bob, 2]},
        ]
    )
    assert [r.ok for r in results] == [True, False, True]
    assert runner.view("get_balance", bob) == 2


def test_audits_skip_prefixed_foreign_keys(ledger, alice):
    stray = BALANCES_PREFIX + b"xx"
    ledger.storage.set(stray, b"\x01")

    assert ledger.balances() == {alice: 1_000_000}
    assert ledger.sum_of_balances() == 1_000_000
    assert ledger.state_summary()["unknown"] == ["0x" + stray.hex()]


@pytest.mark.parametrize(
    "steps",
    [
        ["init"],
        [{"caller": "0x01"}],
        [{"function": 7}],
        [{"function": "init", "args": "1000"}],
        [{"function": "init", "args": {"initial_supply": 1}}],
        [{"function": "init", "caller": 5}],
    ],
)
def test_malformed_steps_run_nothing(runner, steps):
    with pytest.raises(ValueError):
        check_steps(steps)
    with pytest.raises(ValueError):
        runner.run_script([{"function": "init", "args": [5]}] + steps)
    assert runner.storage.snapshot() == {}
