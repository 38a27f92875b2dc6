"""
octra_wallet.tx
===============

Transaction pipeline: canonical encoding, building and signing, nonce
sequencing, submission and batch orchestration.
"""

from .batch import BatchOrchestrator, parse_batch_lines, split_line
from .build import TransactionBuilder, build_transfer, fee_class, parse_amount, to_raw_amount
from .encode import canonical_fields, sign_bytes
from .nonce import NonceSequencer, NonceSession
from .send import SubmissionQueue, classify_response, releases_nonce, send_transaction

__all__ = [
    "canonical_fields",
    "sign_bytes",
    "parse_amount",
    "to_raw_amount",
    "fee_class",
    "build_transfer",
    "TransactionBuilder",
    "NonceSequencer",
    "NonceSession",
    "classify_response",
    "SubmissionQueue",
    "releases_nonce",
    "send_transaction",
    "parse_batch_lines",
    "split_line",
    "BatchOrchestrator",
]
