"""
Typed error classes for the wallet.

These are raised by the builder, signer, nonce sequencer and the remote
endpoint client so callers can catch specific failure modes while still
being able to catch the base `WalletError`.

Every error carries a stable ``kind`` string. Batch submissions record it on
failed entries and the CLI prints it, so it must not change between releases.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional

__all__ = [
    "WalletError",
    "InvalidAddress",
    "InvalidAmount",
    "InvalidSeed",
    "RemoteRejected",
    "TransportFailure",
    "RemoteTimeout",
    "NetworkUnavailable",
    "error_message_from_body",
]


@dataclass(eq=False)
class WalletError(Exception):
    """Base class for all wallet errors."""

    message: str

    kind: ClassVar[str] = "wallet_error"

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


@dataclass(eq=False)
class InvalidAddress(WalletError):
    """Raised when an address does not match the ``oct`` + 44 alphanumerics format."""

    address: Optional[str] = None

    kind: ClassVar[str] = "invalid_address"

    def __str__(self) -> str:
        if self.address is None:
            return self.message
        return f"{self.message}: {self.address!r}"


@dataclass(eq=False)
class InvalidAmount(WalletError):
    """Raised for non-positive, non-finite, oversized or unparsable amounts."""

    value: Any = None

    kind: ClassVar[str] = "invalid_amount"

    def __str__(self) -> str:
        if self.value is None:
            return self.message
        return f"{self.message}: {self.value!r}"


@dataclass(eq=False)
class InvalidSeed(WalletError):
    """Raised when private key material is not 32 bytes of valid base64."""

    kind: ClassVar[str] = "invalid_seed"


@dataclass(eq=False)
class RemoteRejected(WalletError):
    """
    The endpoint answered but declined the transaction.

    Fields:
      - status: the ``status`` field of the response, if any
      - response: the decoded response body
    """

    status: Optional[str] = None
    response: Optional[Dict[str, Any]] = None

    kind: ClassVar[str] = "remote_rejected"


@dataclass(eq=False)
class TransportFailure(WalletError):
    """
    No usable response was received: connection error, HTTP error status
    without a JSON body, non-JSON body or an unexpected body shape.
    """

    url: Optional[str] = None
    http_status: Optional[int] = None
    detail: Optional[str] = None

    kind: ClassVar[str] = "transport_failure"

    def __str__(self) -> str:
        parts = [self.message]
        if self.http_status is not None:
            parts.append(f"http={self.http_status}")
        if self.url:
            parts.append(f"url={self.url}")
        if self.detail:
            parts.append(f"detail={self.detail!r}")
        return " ".join(parts)


@dataclass(eq=False)
class RemoteTimeout(TransportFailure):
    """The per-call deadline expired before the endpoint answered."""

    kind: ClassVar[str] = "timeout"


@dataclass(eq=False)
class NetworkUnavailable(WalletError):
    """Strict nonce policy: the baseline could not be fetched."""

    cause: Optional[str] = None

    kind: ClassVar[str] = "network_unavailable"

    def __str__(self) -> str:
        if not self.cause:
            return self.message
        return f"{self.message} ({self.cause})"


def error_message_from_body(body: Any, fallback: str = "unknown error") -> str:
    """
    Pull a human-readable message out of an endpoint response body.

    The ``error`` field is either a plain string or an object of the form
    ``{"type": ..., "reason": ...}``.
    """
    if not isinstance(body, dict):
        return fallback
    err = body.get("error")
    if err is None or err == "":
        return fallback
    if isinstance(err, dict):
        etype = err.get("type") or "unknown"
        reason = err.get("reason") or ""
        return f"{etype}: {reason}" if reason else str(etype)
    return str(err)
