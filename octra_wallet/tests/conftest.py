from __future__ import annotations

import pytest

from octra_wallet.config import get_relay_settings, get_settings
from octra_wallet.rpc.http import EndpointConfig, RemoteEndpoint
from octra_wallet.tests import ADDRESS, RPC_URL, SEED_B64, make_account
from octra_wallet.tx.build import TransactionBuilder
from octra_wallet.tx.nonce import NonceSequencer


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    get_relay_settings.cache_clear()
    yield
    get_settings.cache_clear()
    get_relay_settings.cache_clear()


@pytest.fixture
def account():
    return make_account()


@pytest.fixture
def clock():
    """Fixed clock for deterministic timestamps."""
    return lambda: 1_700_000_000.25


@pytest.fixture
def builder(account, clock):
    return TransactionBuilder(account, clock=clock)


@pytest.fixture
async def endpoint():
    ep = RemoteEndpoint(EndpointConfig(rpc_url=RPC_URL, timeout_s=2.0))
    async with ep:
        yield ep


@pytest.fixture
def sequencer(endpoint):
    return NonceSequencer(endpoint)


@pytest.fixture
def wallet_env(monkeypatch, tmp_path):
    """Point WALLET_* at the test endpoint; run from an empty dir (no .env)."""
    monkeypatch.chdir(tmp_path)
    for key in (
        "WALLET_USE_PROXY",
        "WALLET_PROXY_URL",
        "WALLET_NONCE_FAIL_OPEN",
        "WALLET_TIMEOUT",
        "WALLET_LOG_FORMAT",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("WALLET_RPC", RPC_URL)
    monkeypatch.setenv("WALLET_ADDRESS", ADDRESS)
    monkeypatch.setenv("WALLET_PRIVATE_KEY", SEED_B64)
    monkeypatch.setenv("WALLET_LOG_LEVEL", "ERROR")
    return monkeypatch
