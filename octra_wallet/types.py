from __future__ import annotations

"""
Core wallet types.

Two complementary representations, as elsewhere in the package:
- `TypedDict` shapes mirroring the JSON bodies exchanged with the endpoint.
- `@dataclass` models used locally, with `to_wire()` / `from_wire()` helpers.

Nothing here performs network I/O.
"""

import base64
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, TypedDict

from .address import validate_address
from .wallet.signer import decode_seed

# --- Common aliases ----------------------------------------------------------

Address = str  # "oct" + 44 alphanumerics
B64 = str  # standard base64 text

ACCEPTED_STATUS = "accepted"


# --- Wire shapes -------------------------------------------------------------


# "from" is a keyword, hence the functional form
TxWire = TypedDict(
    "TxWire",
    {
        "from": Address,
        "to_": Address,
        "amount": str,
        "nonce": int,
        "ou": str,
        "timestamp": float,
        "message": str,
        "public_key": B64,
        "signature": B64,
    },
    total=False,
)


class BalanceWire(TypedDict, total=False):
    balance: str
    nonce: Any  # int or decimal string depending on node version


class HistoryItemWire(TypedDict, total=False):
    hash: str
    epoch: Any
    url: str


# --- Account -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Account:
    """
    The wallet's single account: address plus 32-byte Ed25519 seed.

    Immutable once loaded. The seed is excluded from ``repr`` so an Account
    can be logged or printed without leaking key material.
    """

    address: Address
    seed: bytes = field(repr=False)

    @classmethod
    def from_b64(cls, address: str, seed_b64: str) -> "Account":
        validate_address(address, what="account address")
        return cls(address=address, seed=decode_seed(seed_b64))

    @property
    def seed_b64(self) -> B64:
        return base64.b64encode(self.seed).decode("ascii")


# --- Transactions ------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """
    Canonical, submittable transfer.

    `amount` is the integer count of smallest units (1 OCT = 1_000_000).
    `signature` covers from/to/amount/nonce/fee_class/timestamp only and is
    attached last via `with_signature`.
    """

    from_addr: Address
    to: Address
    amount: int
    nonce: int
    fee_class: str
    timestamp: float
    public_key: B64
    message: Optional[str] = None
    signature: Optional[B64] = None

    @property
    def is_signed(self) -> bool:
        return bool(self.signature)

    def with_signature(self, signature: B64) -> "TransactionRecord":
        return replace(self, signature=signature)

    def to_wire(self) -> TxWire:
        """Body for ``POST send-tx``. Raises ValueError when unsigned."""
        if not self.signature:
            raise ValueError("transaction record is not signed")
        body: TxWire = {
            "from": self.from_addr,
            "to_": self.to,
            "amount": str(self.amount),
            "nonce": self.nonce,
            "ou": self.fee_class,
            "timestamp": self.timestamp,
        }
        if self.message:
            body["message"] = self.message
        body["public_key"] = self.public_key
        body["signature"] = self.signature
        return body


# --- Account state -----------------------------------------------------------


def _to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal(0)
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal(0)


def _to_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True, slots=True)
class BalanceInfo:
    balance: Decimal
    nonce: int

    @staticmethod
    def from_wire(d: Optional[BalanceWire]) -> "BalanceInfo":
        d = d or {}
        return BalanceInfo(balance=_to_decimal(d.get("balance")), nonce=_to_int(d.get("nonce")))


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    hash: str
    epoch: Any
    url: Optional[str] = None

    @staticmethod
    def from_wire(d: HistoryItemWire) -> "HistoryEntry":
        return HistoryEntry(hash=str(d.get("hash", "")), epoch=d.get("epoch"), url=d.get("url"))

    def to_dict(self) -> Dict[str, Any]:
        return {"hash": self.hash, "epoch": self.epoch, "url": self.url}


# --- Batch results -----------------------------------------------------------


@dataclass(slots=True)
class BatchEntry:
    """
    One processed batch line.

    `line_no` is 1-based over the non-blank input lines. `amount` is the raw
    amount token as typed. Exactly one of `result` / `error` is set.
    """

    line_no: int
    line: str
    to: str
    amount: str
    nonce: Optional[int] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def tx_hash(self) -> Optional[str]:
        if self.result:
            return self.result.get("tx_hash")
        return None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"line": self.line_no, "to": self.to, "amount": self.amount}
        if self.nonce is not None:
            d["nonce"] = self.nonce
        if self.result is not None:
            d["result"] = self.result
        if self.error is not None:
            d["error"] = self.error
            d["kind"] = self.error_kind
        return d


@dataclass(slots=True)
class BatchOutcome:
    success: List[BatchEntry] = field(default_factory=list)
    failed: List[BatchEntry] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.success) + len(self.failed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": [e.to_dict() for e in self.success],
            "failed": [e.to_dict() for e in self.failed],
        }


__all__ = [
    "Address",
    "B64",
    "ACCEPTED_STATUS",
    "TxWire",
    "BalanceWire",
    "HistoryItemWire",
    "Account",
    "TransactionRecord",
    "BalanceInfo",
    "HistoryEntry",
    "BatchEntry",
    "BatchOutcome",
]
