"""
octra_wallet.wallet
===================

Signing helpers. The `client` (Wallet facade) and `export` submodules are
imported directly; they depend on `octra_wallet.types`, which in turn needs
this package's signer.
"""

from .signer import Ed25519Signer, decode_seed, derive_public_key, sign, verify

__all__ = [
    "Ed25519Signer",
    "decode_seed",
    "derive_public_key",
    "sign",
    "verify",
]
