"""
Octra wallet for Python
Convenience exports for the most common client APIs.
"""

from .version import __version__  # noqa: F401

# Core config & errors
from .config import WalletSettings, get_settings  # noqa: F401
from .errors import (  # noqa: F401
    WalletError,
    InvalidAddress,
    InvalidAmount,
    InvalidSeed,
    RemoteRejected,
    TransportFailure,
    RemoteTimeout,
    NetworkUnavailable,
)

# Types
from .types import Account, TransactionRecord, BatchOutcome  # noqa: F401

# Addresses
from .address import is_valid_address, validate_address  # noqa: F401

# RPC
from .rpc.http import RemoteEndpoint  # noqa: F401

# Wallet
from .wallet.signer import Ed25519Signer  # noqa: F401
from .wallet.export import export_wallet  # noqa: F401
from .wallet.client import Wallet  # noqa: F401

# Tx helpers
from .tx.build import TransactionBuilder, build_transfer  # noqa: F401
from .tx.encode import sign_bytes  # noqa: F401
from .tx.nonce import NonceSequencer  # noqa: F401
from .tx.batch import BatchOrchestrator  # noqa: F401

__all__ = [
    "__version__",
    # Core
    "WalletSettings", "get_settings",
    "WalletError", "InvalidAddress", "InvalidAmount", "InvalidSeed",
    "RemoteRejected", "TransportFailure", "RemoteTimeout", "NetworkUnavailable",
    # Types
    "Account", "TransactionRecord", "BatchOutcome",
    # Address
    "is_valid_address", "validate_address",
    # RPC
    "RemoteEndpoint",
    # Wallet
    "Ed25519Signer", "export_wallet", "Wallet",
    # Tx
    "TransactionBuilder", "build_transfer", "sign_bytes",
    "NonceSequencer", "BatchOrchestrator",
]
