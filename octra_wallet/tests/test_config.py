from __future__ import annotations

import pytest
from pydantic import ValidationError

from octra_wallet.config import RelaySettings, WalletSettings, get_settings
from octra_wallet.errors import InvalidAddress, InvalidSeed
from octra_wallet.tests import ADDRESS, PROXY_URL, RPC_URL, SEED, SEED_B64


def test_settings_from_env(wallet_env):
    s = get_settings()
    assert s.rpc == RPC_URL
    assert s.address == ADDRESS
    assert s.nonce_fail_open is True
    assert s.timeout == 10.0
    assert s.account().seed == SEED
    assert SEED_B64 not in s.model_dump_json()


def test_settings_are_cached(wallet_env):
    assert get_settings() is get_settings()


def test_endpoint_config_reflects_proxy(wallet_env):
    wallet_env.setenv("WALLET_USE_PROXY", "true")
    wallet_env.setenv("WALLET_PROXY_URL", PROXY_URL + "/")
    cfg = get_settings().endpoint_config()
    assert cfg.use_proxy is True
    assert cfg.proxy_url == PROXY_URL
    assert cfg.route("send-tx")[0] == f"{PROXY_URL}/api/proxy"


def test_proxy_requires_url(wallet_env):
    wallet_env.setenv("WALLET_USE_PROXY", "1")
    with pytest.raises(ValidationError):
        WalletSettings()


def test_strict_nonce_and_timeout(wallet_env):
    wallet_env.setenv("WALLET_NONCE_FAIL_OPEN", "false")
    wallet_env.setenv("WALLET_TIMEOUT", "2.5")
    s = WalletSettings()
    assert s.nonce_fail_open is False
    assert s.timeout == 2.5


def test_bad_account_material(wallet_env):
    wallet_env.setenv("WALLET_ADDRESS", "oct-short")
    with pytest.raises(InvalidAddress):
        WalletSettings().account()

    wallet_env.setenv("WALLET_ADDRESS", ADDRESS)
    wallet_env.setenv("WALLET_PRIVATE_KEY", "not-base64!")
    with pytest.raises(InvalidSeed):
        WalletSettings().account()


def test_secret_not_in_repr(wallet_env):
    s = WalletSettings()
    assert s.private_key.get_secret_value() not in repr(s)


def test_relay_settings(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("RELAY_UPSTREAM_URL", "http://up.test/")
    monkeypatch.setenv("RELAY_PORT", "9000")
    r = RelaySettings()
    assert r.upstream_url == "http://up.test"
    assert r.port == 9000
    assert r.log_format == "json"
