"""
Batch (multi-send) orchestration.

Input is one transfer per line in the form ``<address>:<amount>``. Every line
is processed independently: a bad line or a rejected submission is recorded
in ``failed`` and the batch moves on. The nonce baseline is fetched once,
before the first line; lines failing local validation consume no nonce.
A failed submission keeps its nonce within the batch, so later lines never
reuse it.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Tuple, Union

from ..address import validate_address
from ..errors import WalletError
from ..types import BatchEntry, BatchOutcome
from .build import TransactionBuilder, parse_amount
from .nonce import NonceSequencer
from .send import SubmissionQueue, classify_response, releases_nonce

log = logging.getLogger(__name__)

LINE_SEPARATOR = ":"

BatchInput = Union[str, Iterable[str]]
ResultCallback = Callable[[BatchEntry], None]


def parse_batch_lines(lines: BatchInput) -> List[Tuple[int, str]]:
    """
    Normalize batch input to ``[(line_no, line), ...]``.

    A single string is split on newlines. Lines are trimmed and blank ones
    dropped; numbering is 1-based over the remaining lines.
    """
    raw = lines.splitlines() if isinstance(lines, str) else list(lines)
    kept = [str(line).strip() for line in raw]
    return list(enumerate((line for line in kept if line), start=1))


def split_line(line: str) -> Tuple[str, str]:
    """Split ``to:amount`` on the first separator; missing parts are ''."""
    to, _, amount = line.partition(LINE_SEPARATOR)
    return to.strip(), amount.strip()


class BatchOrchestrator:
    def __init__(
        self,
        builder: TransactionBuilder,
        sequencer: NonceSequencer,
        queue: SubmissionQueue,
    ) -> None:
        self.builder = builder
        self.sequencer = sequencer
        self.queue = queue

    async def submit_batch(
        self,
        lines: BatchInput,
        on_result: Optional[ResultCallback] = None,
    ) -> BatchOutcome:
        """
        Submit every line and partition the outcomes.

        Only NetworkUnavailable (strict nonce policy) escapes, and only
        before any line has been sent.
        """
        items = parse_batch_lines(lines)
        outcome = BatchOutcome()
        if not items:
            return outcome

        session = await self.sequencer.begin(self.builder.account.address)
        log.info("batch of %d lines, nonce baseline %d", len(items), session.baseline)

        for line_no, line in items:
            to, amount = split_line(line)
            entry = BatchEntry(line_no=line_no, line=line, to=to, amount=amount)
            try:
                validate_address(to, what="destination address")
                parse_amount(amount)
            except WalletError as exc:
                self._fail(outcome, entry, exc)
            else:
                entry.nonce = session.next()
                try:
                    record = self.builder.build(to, amount, entry.nonce)
                    entry.result = classify_response(await self.queue.submit(record))
                except WalletError as exc:
                    if releases_nonce(exc):
                        session.release(entry.nonce)
                    self._fail(outcome, entry, exc)
                else:
                    outcome.success.append(entry)
            if on_result is not None:
                on_result(entry)

        log.info("batch done: %d accepted, %d failed", len(outcome.success), len(outcome.failed))
        return outcome

    @staticmethod
    def _fail(outcome: BatchOutcome, entry: BatchEntry, exc: WalletError) -> None:
        entry.error = str(exc)
        entry.error_kind = exc.kind
        outcome.failed.append(entry)
        log.warning("line %d failed (%s): %s", entry.line_no, exc.kind, exc)


__all__ = [
    "LINE_SEPARATOR",
    "parse_batch_lines",
    "split_line",
    "BatchOrchestrator",
]
