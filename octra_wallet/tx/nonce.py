"""
Nonce sequencing.

A `NonceSequencer` reads the account's on-chain nonce once per session and
hands out ``baseline + 1``, ``baseline + 2``, … from memory. Every issued
nonce also moves a process-wide cursor per address, so sessions that overlap
(two concurrent sends, a send during a batch) or follow each other before the
chain catches up never hand out the same nonce.

    seq = NonceSequencer(endpoint)
    session = await seq.begin(account.address)
    n1 = session.next()
    n2 = session.next()   # n1 + 1 unless another session issued in between

A submission the endpoint did not take can give its nonce back with
``session.release(n)``. The cursor only moves down over a contiguous run of
released nonces at its top, so a nonce still held by another session is
never reissued. Timed-out submissions keep their nonce; the endpoint may
have received them.

Failure policy for the baseline fetch:

* ``fail_open=True``  log a warning and treat the baseline as 0.
* ``fail_open=False`` raise NetworkUnavailable.

A response without a ``nonce`` field always means 0 (fresh account).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Protocol, Set

from ..errors import NetworkUnavailable, TransportFailure
from ..types import BalanceInfo

log = logging.getLogger(__name__)


class BalanceSource(Protocol):
    async def get_balance(self, address: str) -> BalanceInfo: ...


class NonceSession:
    """One sequencing session: a baseline plus an in-memory counter."""

    __slots__ = ("address", "baseline", "_current", "_sequencer")

    def __init__(self, sequencer: "NonceSequencer", address: str, baseline: int) -> None:
        self._sequencer = sequencer
        self.address = address
        self.baseline = baseline
        self._current = baseline

    @property
    def last(self) -> int:
        """Most recently issued nonce (the baseline before the first `next`)."""
        return self._current

    def next(self) -> int:
        self._current = self._sequencer._issue(self.address, self._current)
        return self._current

    def release(self, nonce: int) -> None:
        """Give back `nonce` after a submission the endpoint did not take."""
        self._sequencer._release(self.address, nonce)


class NonceSequencer:
    """
    Per-process nonce source.

    Share one instance for every session of an account; baseline fetches are
    serialized with an ``asyncio.Lock``. Issuing and releasing never await,
    so they are atomic with respect to other tasks.
    """

    def __init__(self, endpoint: BalanceSource, *, fail_open: bool = True) -> None:
        self.endpoint = endpoint
        self.fail_open = fail_open
        self._issued: Dict[str, int] = {}
        self._released: Dict[str, Set[int]] = {}
        self._lock = asyncio.Lock()

    def last_issued(self, address: str) -> Optional[int]:
        return self._issued.get(address)

    def _issue(self, address: str, after: int) -> int:
        nonce = max(after, self._issued.get(address, after)) + 1
        self._issued[address] = nonce
        self._released.get(address, set()).discard(nonce)
        return nonce

    def _release(self, address: str, nonce: int) -> None:
        top = self._issued.get(address)
        if top is None or nonce > top:
            return
        released = self._released.setdefault(address, set())
        released.add(nonce)
        while top in released:
            top -= 1
        self._issued[address] = top
        log.debug("nonce %d released for %s, cursor at %d", nonce, address, top)

    async def fetch_baseline(self, address: str) -> int:
        """Return the on-chain nonce for `address`, applying the failure policy."""
        try:
            info = await self.endpoint.get_balance(address)
        except TransportFailure as exc:
            if not self.fail_open:
                raise NetworkUnavailable("could not fetch nonce", cause=str(exc)) from exc
            log.warning("nonce fetch failed for %s, assuming 0: %s", address, exc)
            return 0
        return info.nonce

    async def begin(self, address: str) -> NonceSession:
        """
        Start a session. The baseline is ``max(on-chain nonce, last issued)``.
        """
        async with self._lock:
            on_chain = await self.fetch_baseline(address)
            released = self._released.get(address)
            if released:
                released.difference_update({n for n in released if n <= on_chain})
            issued = self._issued.get(address)
            baseline = on_chain if issued is None else max(on_chain, issued)
            if baseline != on_chain:
                log.info(
                    "nonce for %s resumes at %d (chain reports %d)", address, baseline, on_chain
                )
            return NonceSession(self, address, baseline)


__all__ = ["BalanceSource", "NonceSession", "NonceSequencer"]
