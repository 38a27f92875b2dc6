"""Wallet export formats."""

from __future__ import annotations

import json
from typing import Literal

from ..types import Account

ExportFormat = Literal["wallet", "privatekey"]
EXPORT_FORMATS = ("wallet", "privatekey")


def export_wallet(account: Account, rpc: str, fmt: str = "wallet") -> str:
    """
    Render the account for backup.

    "wallet"     → pretty JSON ``{"addr", "priv", "rpc"}`` (2-space indent)
    "privatekey" → the base64 seed

    Raises ValueError for any other format.
    """
    if fmt == "privatekey":
        return account.seed_b64
    if fmt == "wallet":
        return json.dumps({"addr": account.address, "priv": account.seed_b64, "rpc": rpc}, indent=2)
    raise ValueError(f"unknown export format {fmt!r}; expected one of {', '.join(EXPORT_FORMATS)}")


__all__ = ["ExportFormat", "EXPORT_FORMATS", "export_wallet"]
