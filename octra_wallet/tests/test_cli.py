from __future__ import annotations

import json

import httpx
import respx
from typer.testing import CliRunner

from octra_wallet.cli.main import app
from octra_wallet.tests import ADDRESS, RPC_URL, SEED_B64, addr

runner = CliRunner()

BALANCE_URL = f"{RPC_URL}/balance/{ADDRESS}"
SEND_URL = f"{RPC_URL}/send-tx"


def _accepted(n: int) -> httpx.Response:
    return httpx.Response(200, json={"status": "accepted", "tx_hash": f"h{n}"})


@respx.mock
def test_balance_json(wallet_env):
    respx.get(BALANCE_URL).respond(json={"balance": "12.5", "nonce": 3})
    result = runner.invoke(app, ["balance", "--json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"address": ADDRESS, "balance": "12.5", "nonce": 3}


@respx.mock
def test_balance_human(wallet_env):
    respx.get(BALANCE_URL).respond(json={"balance": "1234.5", "nonce": 3})
    result = runner.invoke(app, ["balance"])
    assert result.exit_code == 0, result.output
    assert "1,234.500000 OCT" in result.stdout
    assert ADDRESS in result.stdout


@respx.mock
def test_history_json(wallet_env):
    respx.get(f"{RPC_URL}/address/{ADDRESS}").respond(
        json={"recent_transactions": [{"hash": "aa", "epoch": 9, "url": "https://scan/aa"}]}
    )
    result = runner.invoke(app, ["history", "--json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [{"hash": "aa", "epoch": 9, "url": "https://scan/aa"}]


@respx.mock
def test_send_json(wallet_env):
    respx.get(BALANCE_URL).respond(json={"nonce": 1})
    route = respx.post(SEND_URL).mock(side_effect=[_accepted(2)])
    result = runner.invoke(app, ["send", addr("T"), "1.5", "-m", "hi", "--json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["tx_hash"] == "h2"
    sent = json.loads(route.calls.last.request.content)
    assert (sent["nonce"], sent["amount"], sent["message"]) == (2, "1500000", "hi")


def test_send_invalid_address_exits_1(wallet_env):
    result = runner.invoke(app, ["send", "oct-bad", "1"])
    assert result.exit_code == 1
    assert "invalid_address" in result.output


@respx.mock
def test_send_rejected_exits_1(wallet_env):
    respx.get(BALANCE_URL).respond(json={"nonce": 0})
    respx.post(SEND_URL).respond(json={"status": "rejected", "error": "low balance"})
    result = runner.invoke(app, ["send", addr("T"), "1"])
    assert result.exit_code == 1
    assert "low balance" in result.output


@respx.mock
def test_multi_send_from_file(wallet_env, tmp_path):
    respx.get(BALANCE_URL).respond(json={"nonce": 10})
    respx.post(SEND_URL).mock(side_effect=[_accepted(11), _accepted(12)])
    f = tmp_path / "batch.txt"
    f.write_text(f"{addr('X')}:50\n\n{addr('Y')}:25\n", encoding="utf-8")

    result = runner.invoke(app, ["multi-send", str(f), "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [e["nonce"] for e in data["success"]] == [11, 12]
    assert data["failed"] == []


@respx.mock
def test_multi_send_stdin_with_failures_exits_1(wallet_env):
    respx.get(BALANCE_URL).respond(json={"nonce": 0})
    respx.post(SEND_URL).mock(side_effect=[_accepted(1)])

    result = runner.invoke(app, ["multi-send", "-", "--json"], input=f"{addr('X')}:1\nbad:2\n")

    assert result.exit_code == 1
    data = json.loads(result.stdout)
    assert len(data["success"]) == 1
    assert data["failed"][0]["kind"] == "invalid_address"


def test_multi_send_missing_file(wallet_env, tmp_path):
    result = runner.invoke(app, ["multi-send", str(tmp_path / "nope.txt")])
    assert result.exit_code == 1
    assert "no such file" in result.output


def test_export_formats(wallet_env):
    result = runner.invoke(app, ["export", "--format", "privatekey"])
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == SEED_B64

    result = runner.invoke(app, ["export"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"addr": ADDRESS, "priv": SEED_B64, "rpc": RPC_URL}

    result = runner.invoke(app, ["export", "--format", "pem"])
    assert result.exit_code == 1


def test_missing_key_exits_1(wallet_env):
    wallet_env.setenv("WALLET_PRIVATE_KEY", "")
    result = runner.invoke(app, ["export"])
    assert result.exit_code == 1
    assert "invalid_seed" in result.output
