"""
octra_wallet.wallet.signer
==========================

Ed25519 signer for Octra transactions.

This module is a thin, well-typed facade over the `cryptography` package's
Ed25519 primitives. Keys are never generated here: the 32-byte seed is
supplied (base64) by configuration and treated as immutable.

Key features
------------
- Deterministic public-key derivation from the seed
- Detached signatures over canonical sign-bytes (see `octra_wallet.tx.encode`)
- Standard verification helper
- Base64 in, base64 out, matching the endpoint's wire format

Notes
-----
- Ed25519 signing is deterministic (RFC 8032): the same seed and message
  always produce the same signature.
- The seed is never logged and is kept out of ``repr``.
"""

from __future__ import annotations

import base64
import binascii
from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (Ed25519PrivateKey,
                                                               Ed25519PublicKey)

from ..errors import InvalidSeed

SEED_LEN = 32
PUBLIC_KEY_LEN = 32
SIGNATURE_LEN = 64

SeedLike = Union[bytes, bytearray, memoryview, str]

__all__ = [
    "SEED_LEN",
    "decode_seed",
    "derive_public_key",
    "sign",
    "verify",
    "Ed25519Signer",
]


# --- Helpers -----------------------------------------------------------------


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_seed(seed: SeedLike) -> bytes:
    """
    Normalize seed material into exactly 32 raw bytes.

    Strings are treated as standard base64 (the configuration format); bytes
    are taken as-is. Raises InvalidSeed otherwise.
    """
    if isinstance(seed, str):
        try:
            raw = base64.b64decode(seed.strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidSeed("private key is not valid base64") from e
    elif isinstance(seed, (bytes, bytearray, memoryview)):
        raw = bytes(seed)
    else:
        raise InvalidSeed(f"unsupported seed type: {type(seed).__name__}")
    if len(raw) != SEED_LEN:
        raise InvalidSeed(f"seed must be {SEED_LEN} bytes, got {len(raw)}")
    return raw


def _private_key(seed: SeedLike) -> Ed25519PrivateKey:
    return Ed25519PrivateKey.from_private_bytes(decode_seed(seed))


def _public_bytes(sk: Ed25519PrivateKey) -> bytes:
    return sk.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


# --- Functional API ----------------------------------------------------------


def derive_public_key(seed: SeedLike) -> str:
    """Return the base64 Ed25519 public key for `seed`."""
    return _b64(_public_bytes(_private_key(seed)))


def sign(seed: SeedLike, message: bytes) -> str:
    """Return a base64 detached Ed25519 signature over `message`."""
    return _b64(_private_key(seed).sign(bytes(message)))


def verify(public_key: str, message: bytes, signature: str) -> bool:
    """
    Verify a base64 signature against a base64 public key.

    Returns False for malformed inputs as well as for bad signatures.
    """
    try:
        pk = Ed25519PublicKey.from_public_bytes(base64.b64decode(public_key, validate=True))
        pk.verify(base64.b64decode(signature, validate=True), bytes(message))
    except (InvalidSignature, binascii.Error, ValueError):
        return False
    return True


# --- Object API --------------------------------------------------------------


class Ed25519Signer:
    """
    Holds one account's signing key.

    Create via ``Ed25519Signer(seed)`` where `seed` is raw bytes or base64.
    """

    __slots__ = ("_sk", "_pk_b64")

    def __init__(self, seed: SeedLike) -> None:
        self._sk = _private_key(seed)
        self._pk_b64 = _b64(_public_bytes(self._sk))

    def __repr__(self) -> str:
        return f"Ed25519Signer(public_key={self._pk_b64!r})"

    @property
    def public_key(self) -> str:
        return self._pk_b64

    def sign(self, message: bytes) -> str:
        return _b64(self._sk.sign(bytes(message)))

    def verify(self, message: bytes, signature: str) -> bool:
        return verify(self._pk_b64, message, signature)
