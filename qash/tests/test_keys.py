from __future__ import annotations

import pytest

from qash.errors import InvalidArgument
from qash.ledger.keys import (
    ALLOWANCE_KEY_SIZE,
    ALLOWANCES_PREFIX,
    BALANCE_KEY_SIZE,
    BALANCES_PREFIX,
    OWNER_KEY,
    PAUSE_KEY,
    TOTAL_SUPPLY_KEY,
    address_of_balance_key,
    allowance_key,
    balance_key,
    classify_key,
)


def test_layout_bytes():
    assert BALANCES_PREFIX == b"BALANCES\x00"
    assert ALLOWANCES_PREFIX == b"ALLOWANCES\x00"
    assert OWNER_KEY == b"OWNER\x00"
    assert PAUSE_KEY == b"PAUSE\x00"
    assert TOTAL_SUPPLY_KEY == b"TOTAL_SUPPLY\x00"
    assert BALANCE_KEY_SIZE == 44
    assert ALLOWANCE_KEY_SIZE == 81


def test_balance_key_is_prefix_plus_address(alice):
    k = balance_key(alice)
    assert k == BALANCES_PREFIX + alice
    assert len(k) == BALANCE_KEY_SIZE
    assert balance_key("0x" + alice.hex()) == k
    assert address_of_balance_key(k) == alice


def test_allowance_key_is_ordered(alice, bob):
    k = allowance_key(alice, bob)
    assert k == ALLOWANCES_PREFIX + alice + bob
    assert len(k) == ALLOWANCE_KEY_SIZE
    assert allowance_key(bob, alice) != k


def test_key_classes_do_not_collide(alice, bob):
    keys = {balance_key(alice), balance_key(bob), allowance_key(alice, bob),
            allowance_key(bob, alice), OWNER_KEY, PAUSE_KEY, TOTAL_SUPPLY_KEY}
    assert len(keys) == 7
    assert classify_key(balance_key(alice)) == "balance"
    assert classify_key(allowance_key(alice, bob)) == "allowance"
    assert classify_key(OWNER_KEY) == "owner"
    assert classify_key(PAUSE_KEY) == "pause"
    assert classify_key(TOTAL_SUPPLY_KEY) == "total_supply"
    assert classify_key(b"BALANCES\x00short") is None


@pytest.mark.parametrize("bad", [b"", b"\x01" * 34, b"\x01" * 36, "0xzz"])
def test_bad_address_rejected(bad):
    with pytest.raises(InvalidArgument):
        balance_key(bad)


def test_address_of_non_balance_key():
    with pytest.raises(ValueError):
        address_of_balance_key(OWNER_KEY)
