"""
octra_wallet.wallet.client
==========================

`Wallet` wires one account to the remote endpoint: it owns the signer, the
nonce sequencer and the submission queue, and exposes the operations the CLI
offers.

    async with Wallet.from_settings() as w:
        info = await w.balance()
        resp = await w.send("oct...", "1.25", message="hi")
        outcome = await w.send_many("oct...:1\\noct...:2")
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from ..config import WalletSettings, get_settings
from ..rpc.http import RemoteEndpoint
from ..tx.batch import BatchInput, BatchOrchestrator, ResultCallback
from ..tx.build import AmountLike, Clock, TransactionBuilder
from ..tx.nonce import NonceSequencer
from ..tx.send import SubmissionQueue, send_transaction
from ..types import Account, BalanceInfo, BatchOutcome, HistoryEntry
from .export import export_wallet

log = logging.getLogger(__name__)


class Wallet:
    def __init__(
        self,
        account: Account,
        endpoint: RemoteEndpoint,
        *,
        sequencer: Optional[NonceSequencer] = None,
        fail_open: bool = True,
        timeout: Optional[float] = None,
        clock: Clock = time.time,
    ) -> None:
        self.account = account
        self.endpoint = endpoint
        self.builder = TransactionBuilder(account, clock=clock)
        self.sequencer = sequencer or NonceSequencer(endpoint, fail_open=fail_open)
        self.queue = SubmissionQueue(endpoint, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Optional[WalletSettings] = None, **kwargs: Any) -> "Wallet":
        s = settings or get_settings()
        endpoint = RemoteEndpoint(s.endpoint_config())
        return cls(
            s.account(),
            endpoint,
            fail_open=s.nonce_fail_open,
            timeout=s.timeout,
            **kwargs,
        )

    def __repr__(self) -> str:
        return f"Wallet(address={self.account.address!r}, rpc={self.rpc_url!r})"

    @property
    def address(self) -> str:
        return self.account.address

    @property
    def public_key(self) -> str:
        return self.builder.signer.public_key

    @property
    def rpc_url(self) -> str:
        return self.endpoint.config.rpc_url

    # ---------- lifecycle ----------

    async def start(self) -> None:
        await self.endpoint.start()
        await self.queue.start()

    async def close(self) -> None:
        await self.queue.close()
        await self.endpoint.close()

    async def __aenter__(self) -> "Wallet":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ---------- reads ----------

    async def balance(self) -> BalanceInfo:
        return await self.endpoint.get_balance(self.address)

    async def history(self) -> List[HistoryEntry]:
        return await self.endpoint.get_history(self.address)

    # ---------- sends ----------

    async def send(
        self, to: str, amount: AmountLike, message: Optional[str] = None
    ) -> Dict[str, Any]:
        if not self.queue.running:
            await self.start()
        return await send_transaction(
            builder=self.builder,
            sequencer=self.sequencer,
            queue=self.queue,
            to=to,
            amount=amount,
            message=message,
        )

    async def send_many(
        self, lines: BatchInput, on_result: Optional[ResultCallback] = None
    ) -> BatchOutcome:
        if not self.queue.running:
            await self.start()
        orchestrator = BatchOrchestrator(self.builder, self.sequencer, self.queue)
        return await orchestrator.submit_batch(lines, on_result=on_result)

    # ---------- export ----------

    def export(self, fmt: str = "wallet") -> str:
        return export_wallet(self.account, self.rpc_url, fmt)


__all__ = ["Wallet"]
