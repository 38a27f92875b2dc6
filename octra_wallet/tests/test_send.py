from __future__ import annotations

import asyncio

import httpx
import pytest
import respx

from octra_wallet.errors import InvalidAddress, InvalidAmount, RemoteRejected, RemoteTimeout
from octra_wallet.tests import ADDRESS, RPC_URL, addr, sent_bodies
from octra_wallet.tx.send import SubmissionQueue, classify_response, send_transaction

pytestmark = pytest.mark.anyio

TO = addr("T")
BALANCE_URL = f"{RPC_URL}/balance/{ADDRESS}"
SEND_URL = f"{RPC_URL}/send-tx"


# --- classification ----------------------------------------------------------


def test_accepted_body_passes_through():
    body = {"status": "accepted", "tx_hash": "h"}
    assert classify_response(body) is body


@pytest.mark.parametrize(
    "body, message",
    [
        ({"status": "rejected", "error": "insufficient balance"}, "insufficient balance"),
        ({"error": {"type": "nonce", "reason": "too low"}}, "nonce: too low"),
        ({"tx_hash": "h"}, "transaction rejected"),  # hash alone is not acceptance
        ({"status": "Accepted"}, "transaction rejected"),
        ({"status": "pending"}, "transaction rejected"),
        ([1, 2], "transaction rejected"),
    ],
)
def test_anything_else_is_rejected(body, message):
    with pytest.raises(RemoteRejected) as ei:
        classify_response(body)
    assert str(ei.value) == message
    assert ei.value.kind == "remote_rejected"


# --- submission queue ---------------------------------------------------------


class _SlowSink:
    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0
        self.seen = []

    async def send_tx(self, record):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            self.seen.append(record)
            return {"status": "accepted", "n": len(self.seen)}
        finally:
            self.in_flight -= 1


async def test_queue_runs_one_submission_at_a_time():
    sink = _SlowSink(delay=0.01)
    async with SubmissionQueue(sink) as q:
        futs = [q.submit(f"rec{i}") for i in range(5)]  # type: ignore[arg-type]
        results = await asyncio.gather(*futs)

    assert [r["n"] for r in results] == [1, 2, 3, 4, 5]
    assert sink.seen == [f"rec{i}" for i in range(5)]
    assert sink.max_in_flight == 1


async def test_queue_timeout_sets_remote_timeout():
    async with SubmissionQueue(_SlowSink(delay=1.0), timeout=0.01) as q:
        with pytest.raises(RemoteTimeout):
            await q.submit("rec")  # type: ignore[arg-type]


async def test_queue_keeps_running_after_a_failure():
    class _Flaky(_SlowSink):
        async def send_tx(self, record):
            if record == "bad":
                raise RemoteRejected("nope")
            return await super().send_tx(record)

    async with SubmissionQueue(_Flaky()) as q:
        bad = q.submit("bad")  # type: ignore[arg-type]
        good = q.submit("good")  # type: ignore[arg-type]
        with pytest.raises(RemoteRejected):
            await bad
        assert (await good)["status"] == "accepted"


async def test_submit_requires_started_queue():
    with pytest.raises(RuntimeError):
        SubmissionQueue(_SlowSink()).submit("rec")  # type: ignore[arg-type]


# --- single send ----------------------------------------------------------------


@respx.mock
async def test_single_send_uses_next_nonce(endpoint, builder, sequencer):
    respx.get(BALANCE_URL).respond(json={"balance": "100", "nonce": 4})
    route = respx.post(SEND_URL).respond(json={"status": "accepted", "tx_hash": "abc"})

    async with SubmissionQueue(endpoint) as q:
        body = await send_transaction(
            builder=builder, sequencer=sequencer, queue=q, to=TO, amount="2.5", message="hi"
        )

    assert body["tx_hash"] == "abc"
    (sent,) = sent_bodies(route)
    assert sent["nonce"] == 5
    assert sent["amount"] == "2500000"
    assert sent["message"] == "hi"
    assert sequencer.last_issued(ADDRESS) == 5


@respx.mock
async def test_single_send_surfaces_rejection(endpoint, builder, sequencer):
    respx.get(BALANCE_URL).respond(json={"nonce": 0})
    respx.post(SEND_URL).respond(json={"status": "rejected", "error": "bad signature"})

    async with SubmissionQueue(endpoint) as q:
        with pytest.raises(RemoteRejected, match="bad signature"):
            await send_transaction(builder=builder, sequencer=sequencer, queue=q, to=TO, amount="1")

    # the rejected nonce goes back to the cursor
    assert sequencer.last_issued(ADDRESS) == 0


@respx.mock
async def test_timed_out_send_keeps_its_nonce(endpoint, builder, sequencer):
    respx.get(BALANCE_URL).respond(json={"nonce": 2})
    respx.post(SEND_URL).mock(side_effect=httpx.ReadTimeout("slow"))

    async with SubmissionQueue(endpoint) as q:
        with pytest.raises(RemoteTimeout):
            await send_transaction(builder=builder, sequencer=sequencer, queue=q, to=TO, amount="1")

    assert sequencer.last_issued(ADDRESS) == 3


@respx.mock
async def test_concurrent_sends_get_distinct_nonces(endpoint, builder, sequencer):
    respx.get(BALANCE_URL).respond(json={"nonce": 10})
    route = respx.post(SEND_URL).respond(json={"status": "accepted"})

    class _Delayed:
        async def send_tx(self, record):
            await asyncio.sleep(0.01)
            return await endpoint.send_tx(record)

    async with SubmissionQueue(_Delayed()) as q:
        await asyncio.gather(
            send_transaction(builder=builder, sequencer=sequencer, queue=q, to=TO, amount="1"),
            send_transaction(builder=builder, sequencer=sequencer, queue=q, to=TO, amount="2"),
        )

    assert sorted(b["nonce"] for b in sent_bodies(route)) == [11, 12]
    assert sequencer.last_issued(ADDRESS) == 12


@pytest.mark.parametrize(
    "to, amount, exc",
    [
        ("oct123", "1", InvalidAddress),
        (TO, "0", InvalidAmount),
        (TO, "x", InvalidAmount),
        (TO, "1e5000", InvalidAmount),
    ],
)
@respx.mock
async def test_single_send_validates_before_network(endpoint, builder, sequencer, to, amount, exc):
    async with SubmissionQueue(endpoint) as q:
        with pytest.raises(exc):
            await send_transaction(builder=builder, sequencer=sequencer, queue=q, to=to, amount=amount)

    assert respx.calls.call_count == 0
