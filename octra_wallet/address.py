"""
Octra address format helpers.

An address is the literal prefix ``oct`` followed by exactly 44 ASCII letters
or digits (47 characters in total). Validation is a pure format check: it
never normalizes, trims or otherwise repairs its input.

    >>> is_valid_address("oct" + "A" * 44)
    True
    >>> is_valid_address("oct" + "A" * 43)
    False
"""

from __future__ import annotations

import re
from typing import Any

from .errors import InvalidAddress

ADDRESS_PREFIX = "oct"
ADDRESS_BODY_LEN = 44
ADDRESS_LEN = len(ADDRESS_PREFIX) + ADDRESS_BODY_LEN

# re.ASCII keeps non-ASCII letters/digits out of the body
_ADDRESS_RE = re.compile(r"^oct[a-zA-Z0-9]{44}$", re.ASCII)


def is_valid_address(address: Any) -> bool:
    """True iff `address` is a string in the fixed Octra address format."""
    if not isinstance(address, str):
        return False
    # fullmatch so a trailing newline cannot satisfy the ``$`` anchor
    return _ADDRESS_RE.fullmatch(address) is not None


def validate_address(address: Any, *, what: str = "address") -> str:
    """
    Return `address` unchanged if valid, else raise InvalidAddress.
    """
    if not is_valid_address(address):
        raise InvalidAddress(f"invalid {what}", address=address if isinstance(address, str) else repr(address))
    return address


__all__ = [
    "ADDRESS_PREFIX",
    "ADDRESS_BODY_LEN",
    "ADDRESS_LEN",
    "is_valid_address",
    "validate_address",
]
