"""
octra_wallet.tx.build
=====================

Builder for signed Octra transfer records.

`build_transfer` performs local validation, converts the decimal amount into
smallest units, picks the fee class, stamps the time and signs. It never
touches the network; nonces come from `octra_wallet.tx.nonce`.

Examples
--------
    from octra_wallet.tx.build import TransactionBuilder

    builder = TransactionBuilder(account)
    record = builder.build("oct...", "1.5", nonce=7, message="thanks")
    record.amount      # 1500000
    record.fee_class   # "1"

Amount handling
---------------
Amounts are parsed into `decimal.Decimal` and scaled by 1_000_000 with
truncation toward zero, so ``0.000001`` is exactly one unit and
``0.0000001`` truncates to zero. Binary floats are converted through their
shortest repr first (``0.1`` → ``Decimal("0.1")``).
"""

from __future__ import annotations

import logging
import time
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Any, Callable, Optional, Union

from ..address import validate_address
from ..errors import InvalidAmount
from ..types import Account, TransactionRecord
from ..wallet.signer import Ed25519Signer
from .encode import sign_bytes

log = logging.getLogger(__name__)

# Smallest units per OCT
MICRO = 1_000_000
# Transfers at or above this many OCT use the high fee class
FEE_CLASS_THRESHOLD = Decimal(1000)
FEE_CLASS_LOW = "1"
FEE_CLASS_HIGH = "3"
# Largest transfer accepted locally, in OCT
MAX_AMOUNT = Decimal(10) ** 15

AmountLike = Union[Decimal, int, float, str]
Clock = Callable[[], float]


# -----------------------------------------------------------------------------
# Amount helpers
# -----------------------------------------------------------------------------


def parse_amount(value: Any) -> Decimal:
    """
    Parse a user-supplied amount into a finite, strictly positive Decimal.

    Raises InvalidAmount for anything else: bools, NaN, infinities, zero or
    negative values, and anything above MAX_AMOUNT OCT.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmount("amount is not a number", value=value)
    if isinstance(value, Decimal):
        dec = value
    elif isinstance(value, int):
        dec = Decimal(value)
    elif isinstance(value, float):
        dec = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidAmount("amount is empty", value=value)
        try:
            dec = Decimal(text)
        except InvalidOperation:
            raise InvalidAmount("amount is not a number", value=value) from None
    else:
        raise InvalidAmount("amount is not a number", value=value)

    if not dec.is_finite():
        raise InvalidAmount("amount must be finite", value=value)
    if dec <= 0:
        raise InvalidAmount("amount must be positive", value=value)
    if dec > MAX_AMOUNT:
        raise InvalidAmount("amount is too large", value=value)
    return dec


def to_raw_amount(amount: Decimal) -> int:
    """floor(amount × 1_000_000) for positive amounts, exact."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(amount.as_tuple().digits) + 16)
        return int((amount * MICRO).to_integral_value(rounding=ROUND_DOWN))


def fee_class(amount: Decimal) -> str:
    return FEE_CLASS_LOW if amount < FEE_CLASS_THRESHOLD else FEE_CLASS_HIGH


# -----------------------------------------------------------------------------
# Builders
# -----------------------------------------------------------------------------


def build_transfer(
    *,
    from_addr: str,
    to: str,
    amount: AmountLike,
    nonce: int,
    signer: Ed25519Signer,
    message: Optional[str] = None,
    clock: Clock = time.time,
) -> TransactionRecord:
    """
    Construct and sign a transfer record.

    Raises InvalidAddress / InvalidAmount on bad input; ValueError for a
    negative nonce.
    """
    validate_address(to, what="destination address")
    dec = parse_amount(amount)
    if isinstance(nonce, bool) or int(nonce) < 0:
        raise ValueError("nonce must be a non-negative integer")

    unsigned = TransactionRecord(
        from_addr=from_addr,
        to=to,
        amount=to_raw_amount(dec),
        nonce=int(nonce),
        fee_class=fee_class(dec),
        timestamp=float(clock()),
        public_key=signer.public_key,
        message=message or None,
    )
    record = unsigned.with_signature(signer.sign(sign_bytes(unsigned)))
    log.debug(
        "built transfer to=%s amount=%d nonce=%d ou=%s",
        record.to,
        record.amount,
        record.nonce,
        record.fee_class,
    )
    return record


class TransactionBuilder:
    """Builds records for one account; the signer is derived once from its seed."""

    def __init__(
        self,
        account: Account,
        signer: Optional[Ed25519Signer] = None,
        *,
        clock: Clock = time.time,
    ) -> None:
        self.account = account
        self.signer = signer or Ed25519Signer(account.seed)
        self._clock = clock

    def build(
        self,
        to: str,
        amount: AmountLike,
        nonce: int,
        message: Optional[str] = None,
    ) -> TransactionRecord:
        return build_transfer(
            from_addr=self.account.address,
            to=to,
            amount=amount,
            nonce=nonce,
            signer=self.signer,
            message=message,
            clock=self._clock,
        )


__all__ = [
    "MICRO",
    "FEE_CLASS_LOW",
    "FEE_CLASS_HIGH",
    "MAX_AMOUNT",
    "parse_amount",
    "to_raw_amount",
    "fee_class",
    "build_transfer",
    "TransactionBuilder",
]
