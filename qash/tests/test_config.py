from __future__ import annotations

import pytest

from qash.config import LedgerConfig, get_config, is_valid_symbol, load_config


def test_defaults_are_canonical():
    cfg = LedgerConfig()
    assert cfg.require_explicit_init is True
    assert cfg.allow_double_pause_noop is False
    assert cfg.memo_field_present is True
    assert cfg.decimals == 6 and cfg.symbol == b"QASH"
    assert cfg.variant == "canonical"


def test_legacy_preset():
    cfg = LedgerConfig.legacy()
    assert (cfg.require_explicit_init, cfg.allow_double_pause_noop, cfg.memo_field_present) == (
        False,
        True,
        False,
    )
    assert cfg.variant == "legacy"
    assert LedgerConfig.legacy(decimals=2).decimals == 2


def test_custom_variant():
    assert LedgerConfig(memo_field_present=False).variant == "custom"


def test_load_from_env_mapping():
    cfg = load_config(
        {
            "QASH_REQUIRE_EXPLICIT_INIT": "false",
            "QASH_ALLOW_DOUBLE_PAUSE_NOOP": "yes",
            "QASH_MEMO_FIELD_PRESENT": "0",
            "QASH_DECIMALS": "8",
            "QASH_SYMBOL": "QSH",
        }
    )
    assert cfg.variant == "legacy"
    assert cfg.decimals == 8
    assert cfg.symbol == b"QSH"


def test_bad_env_values_fall_back():
    cfg = load_config(
        {
            "QASH_REQUIRE_EXPLICIT_INIT": "maybe",
            "QASH_DECIMALS": "999",
            "QASH_SYMBOL": "TOOLONGSYMBOL",
        }
    )
    assert cfg.require_explicit_init is True
    assert cfg.decimals == 255
    assert cfg.symbol == b"QASH"
    assert load_config({"QASH_DECIMALS": "abc"}).decimals == 6


def test_get_config_is_cached(monkeypatch):
    get_config.cache_clear()
    monkeypatch.setenv("QASH_DECIMALS", "3")
    try:
        assert get_config().decimals == 3
        monkeypatch.setenv("QASH_DECIMALS", "4")
        assert get_config() is get_config()
        assert get_config().decimals == 3
    finally:
        get_config.cache_clear()


@pytest.mark.parametrize("kwargs", [{"decimals": 256}, {"decimals": -1}, {"symbol": b""}, {"symbol": b"\x00A"}])
def test_invalid_config_rejected(kwargs):
    with pytest.raises(ValueError):
        LedgerConfig(**kwargs)


def test_symbol_validation():
    assert is_valid_symbol(b"QASH")
    assert not is_valid_symbol(b"123456789")
    assert not is_valid_symbol("QASH")  # type: ignore[arg-type]


def test_to_dict():
    d = LedgerConfig().to_dict()
    assert d["symbol"] == "QASH"
    assert d["variant"] == "canonical"
