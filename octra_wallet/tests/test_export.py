from __future__ import annotations

import json

import pytest

from octra_wallet.tests import ADDRESS, RPC_URL, SEED, SEED_B64
from octra_wallet.wallet.export import export_wallet


def test_privatekey_export_is_idempotent(account):
    first = export_wallet(account, RPC_URL, "privatekey")
    second = export_wallet(account, RPC_URL, "privatekey")
    assert first == second == SEED_B64
    assert account.seed == SEED


def test_wallet_export_is_pretty_json(account):
    out = export_wallet(account, RPC_URL)
    assert json.loads(out) == {"addr": ADDRESS, "priv": SEED_B64, "rpc": RPC_URL}
    assert out.splitlines()[1] == f'  "addr": "{ADDRESS}",'
    assert list(json.loads(out)) == ["addr", "priv", "rpc"]


def test_unknown_format_rejected(account):
    with pytest.raises(ValueError, match="unknown export format"):
        export_wallet(account, RPC_URL, "mnemonic")


def test_account_repr_hides_seed(account):
    assert SEED_B64 not in repr(account)
    assert "seed" not in repr(account)
