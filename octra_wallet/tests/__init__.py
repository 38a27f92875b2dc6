"""
Test utilities for the Octra wallet.

Usage in tests:
    from octra_wallet.tests import ADDRESS, RPC_URL, addr, make_account

    def test_something(endpoint):
        ...
"""
from __future__ import annotations

import base64
import json
import typing as t

import httpx

from octra_wallet.types import Account

# Deterministic test seed: 0x00, 0x01, ..., 0x1f
SEED = bytes(range(32))
SEED_B64 = base64.b64encode(SEED).decode("ascii")

RPC_URL = "http://octra.test"
PROXY_URL = "http://relay.test"


def addr(ch: str = "A") -> str:
    """A well-formed address made of one repeated character."""
    return "oct" + ch * 44


ADDRESS = addr("S")


def make_account(address: str = ADDRESS, seed: bytes = SEED) -> Account:
    return Account(address=address, seed=seed)


def sent_bodies(route: t.Any) -> list[dict]:
    """Decode the JSON bodies a respx route received, in call order."""
    return [json.loads(call.request.content) for call in route.calls]


def json_response(body: t.Any, status: int = 200) -> httpx.Response:
    return httpx.Response(status, json=body)
