"""
octra_wallet.tx.send
====================

Submit signed transfer records and classify the endpoint's answer.

Primary entry points
--------------------
- classify_response(body) -> dict
    Returns the body when ``status == "accepted"``; raises RemoteRejected
    otherwise, with the message taken from the body's ``error`` field.

- SubmissionQueue(endpoint, timeout=...)
    An ``asyncio.Queue`` drained by a single worker task, so at most one
    submission is in flight. ``submit(record)`` returns a Future completing
    with the decoded response or the error.

- send_transaction(...) -> dict
    Single send: validate, sequence one nonce, build, submit, classify.
    A rejected or undelivered submission gives its nonce back.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol, Tuple

from ..address import validate_address
from ..errors import RemoteRejected, RemoteTimeout, WalletError, error_message_from_body
from ..types import ACCEPTED_STATUS, TransactionRecord
from .build import AmountLike, TransactionBuilder, parse_amount
from .nonce import NonceSequencer

log = logging.getLogger(__name__)

REJECTED_FALLBACK = "transaction rejected"


class TxSink(Protocol):
    async def send_tx(self, record: TransactionRecord) -> Dict[str, Any]: ...


# -----------------------------------------------------------------------------
# Classification
# -----------------------------------------------------------------------------


def classify_response(body: Any) -> Dict[str, Any]:
    """
    Accepted iff the body is an object whose ``status`` is exactly "accepted".
    """
    if isinstance(body, dict) and body.get("status") == ACCEPTED_STATUS:
        return body
    status = body.get("status") if isinstance(body, dict) else None
    raise RemoteRejected(
        error_message_from_body(body, fallback=REJECTED_FALLBACK),
        status=status,
        response=body if isinstance(body, dict) else None,
    )


# -----------------------------------------------------------------------------
# Submission queue
# -----------------------------------------------------------------------------

_Item = Tuple[TransactionRecord, "asyncio.Future[Dict[str, Any]]"]


class SubmissionQueue:
    """
    Single-worker submission queue.

    Usage:
        async with SubmissionQueue(endpoint, timeout=10.0) as q:
            resp = await q.submit(record)
    """

    def __init__(self, sink: TxSink, *, timeout: Optional[float] = None) -> None:
        self.sink = sink
        self.timeout = timeout
        self._queue: Optional["asyncio.Queue[Optional[_Item]]"] = None
        self._worker: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._run(), name="octra-submission-worker")

    async def close(self) -> None:
        """Drain pending submissions, then stop the worker."""
        if self._worker is None or self._queue is None:
            return
        await self._queue.put(None)
        await self._worker
        self._worker = None
        self._queue = None

    async def __aenter__(self) -> "SubmissionQueue":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def submit(self, record: TransactionRecord) -> "asyncio.Future[Dict[str, Any]]":
        if not self.running or self._queue is None:
            raise RuntimeError("submission queue is not running")
        fut: "asyncio.Future[Dict[str, Any]]" = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((record, fut))
        return fut

    async def _send(self, record: TransactionRecord) -> Dict[str, Any]:
        if self.timeout is None:
            return await self.sink.send_tx(record)
        try:
            return await asyncio.wait_for(self.sink.send_tx(record), self.timeout)
        except asyncio.TimeoutError as exc:
            raise RemoteTimeout(f"send-tx timed out after {self.timeout}s") from exc

    async def _run(self) -> None:
        assert self._queue is not None
        queue = self._queue
        while True:
            item = await queue.get()
            try:
                if item is None:
                    return
                record, fut = item
                if fut.cancelled():
                    continue
                try:
                    resp = await self._send(record)
                except Exception as exc:  # delivered to the awaiting caller
                    if not fut.done():
                        fut.set_exception(exc)
                else:
                    if not fut.done():
                        fut.set_result(resp)
            finally:
                queue.task_done()


# -----------------------------------------------------------------------------
# Single send
# -----------------------------------------------------------------------------


def releases_nonce(exc: WalletError) -> bool:
    """A timed-out submission may have reached the endpoint; it keeps its nonce."""
    return not isinstance(exc, RemoteTimeout)


async def send_transaction(
    *,
    builder: TransactionBuilder,
    sequencer: NonceSequencer,
    queue: SubmissionQueue,
    to: str,
    amount: AmountLike,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Send one transfer and return the accepted response body.

    Raises InvalidAddress / InvalidAmount before any network I/O,
    NetworkUnavailable under the strict nonce policy, RemoteRejected,
    TransportFailure or RemoteTimeout otherwise.
    """
    validate_address(to, what="destination address")
    parse_amount(amount)

    session = await sequencer.begin(builder.account.address)
    nonce = session.next()
    record = builder.build(to, amount, nonce, message)
    log.info("sending %d units to %s nonce=%d", record.amount, to, nonce)

    try:
        body = classify_response(await queue.submit(record))
    except WalletError as exc:
        if releases_nonce(exc):
            session.release(nonce)
        raise
    log.info("accepted nonce=%d tx_hash=%s", nonce, body.get("tx_hash"))
    return body


__all__ = [
    "REJECTED_FALLBACK",
    "TxSink",
    "classify_response",
    "SubmissionQueue",
    "releases_nonce",
    "send_transaction",
]
