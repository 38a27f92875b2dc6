"""
octra_wallet.tx.encode
======================

Deterministic encoding of the signable part of a transfer.

This module provides:
- `canonical_fields(tx)` → ordered dict of the signable fields, wire names
- `sign_bytes(tx)` → the exact bytes the Ed25519 signer signs

Design notes
------------
* The sign-bytes are compact JSON (``,``/``:`` separators, no whitespace)
  of six fields in a fixed order::

      {"from":…,"to_":…,"amount":"…","nonce":…,"ou":"…","timestamp":…}

  `amount` is the integer smallest-unit count rendered as a decimal string,
  `nonce` a JSON integer, `timestamp` a JSON number (shortest round-trip
  float repr). Non-ASCII characters are emitted verbatim as UTF-8.
* `message`, `public_key` and `signature` are never part of the sign-bytes.
* Order is fixed by construction, not by key sorting, so the output matches
  what the endpoint re-serializes for verification.

Compatibility
-------------
`tx` may be a `TransactionRecord` or a mapping using either the local names
(``from_addr``, ``to``, ``fee_class``) or the wire names (``from``, ``to_``,
``ou``). We read via attribute access with mapping fallback.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping

TxLike = Any  # TransactionRecord or mapping with the signable fields

# (wire name, local aliases...) in signing order
_SIGN_FIELDS = (
    ("from", ("from_addr", "from")),
    ("to_", ("to", "to_")),
    ("amount", ("amount",)),
    ("nonce", ("nonce",)),
    ("ou", ("fee_class", "ou")),
    ("timestamp", ("timestamp",)),
)


def _get(tx: TxLike, names: tuple[str, ...]) -> Any:
    for name in names:
        if isinstance(tx, Mapping):
            if name in tx:
                return tx[name]
        elif hasattr(tx, name):
            return getattr(tx, name)
    raise KeyError(f"Tx field '{names[0]}' not found")


def _amount_str(amount: Any) -> str:
    # wire records carry the amount as a digit string, local ones as int
    if isinstance(amount, int) and not isinstance(amount, bool) and amount >= 0:
        return str(amount)
    if isinstance(amount, str) and amount.isascii() and amount.isdigit():
        return str(int(amount))
    raise ValueError(f"amount must be a non-negative integer, got {amount!r}")


def canonical_fields(tx: TxLike) -> Dict[str, Any]:
    """
    Build the ordered, signable field dict for a transaction.

    Fields (and types):
      - from      : str
      - to_       : str
      - amount    : str (decimal digits of the integer amount)
      - nonce     : int
      - ou        : str (fee class)
      - timestamp : float
    """
    values = {wire: _get(tx, names) for wire, names in _SIGN_FIELDS}
    return {
        "from": str(values["from"]),
        "to_": str(values["to_"]),
        "amount": _amount_str(values["amount"]),
        "nonce": int(values["nonce"]),
        "ou": str(values["ou"]),
        "timestamp": float(values["timestamp"]),
    }


def sign_bytes(tx: TxLike) -> bytes:
    """
    Return the canonical sign-bytes for `tx`.

    This is the exact byte string that must be signed and verified.
    """
    return json.dumps(
        canonical_fields(tx),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


__all__ = [
    "canonical_fields",
    "sign_bytes",
]
