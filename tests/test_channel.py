"""Tests for the migration channel."""

import threading
from unittest.mock import AsyncMock

import pytest
from _helpers import make_candidate

from mosa.migration import LocalMigrationHub, MigrationBatch, MigrationChannel


def _batch(source: int = 1, generation: int = 0, size: int = 2) -> MigrationBatch:
    return MigrationBatch.of(source, generation, [make_candidate(float(i)) for i in range(size)])


def test_receive_on_empty_inbox_returns_none():
    assert MigrationChannel().receive() is None


def test_batches_arrive_in_fifo_order():
    channel = MigrationChannel()
    first, second = _batch(generation=0), _batch(generation=1)
    channel.offer(first)
    channel.offer(second)

    assert channel.pending == 2
    assert channel.receive() is first
    assert channel.receive() is second
    assert channel.receive() is None


def test_full_inbox_drops_oldest():
    channel = MigrationChannel(capacity=2)
    batches = [_batch(generation=g) for g in range(3)]
    for batch in batches:
        channel.offer(batch)

    assert channel.dropped == 1
    assert channel.receive() is batches[1]
    assert channel.receive() is batches[2]


def test_empty_batches_are_ignored():
    channel = MigrationChannel()
    channel.offer(MigrationBatch(1, 0, ()))
    channel.send(MigrationBatch(1, 0, ()))
    assert channel.pending == 0


def test_invalid_capacity():
    with pytest.raises(ValueError):
        MigrationChannel(capacity=0)


def test_batch_snapshots_candidates():
    original = make_candidate(1.0)
    batch = MigrationBatch.of(0, 3, [original])

    (copy,) = batch.candidates
    assert copy is not original
    assert copy.id == original.id
    assert copy.payload == original.payload and copy.payload is not original.payload
    assert len(batch) == 1


def test_concurrent_offers_are_not_lost():
    channel = MigrationChannel(capacity=1000)

    def producer():
        for _ in range(100):
            channel.offer(_batch(size=1))

    threads = [threading.Thread(target=producer) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    received = 0
    while channel.receive() is not None:
        received += 1
    assert received == 400


@pytest.mark.asyncio
async def test_flush_without_transport_never_raises():
    channel = MigrationChannel()
    channel.send(_batch())
    assert await channel.flush() == 0
    assert channel.sent == 0


@pytest.mark.asyncio
async def test_flush_swallows_transport_failure():
    transport = AsyncMock()
    transport.add_listener = lambda listener: None
    transport.emigrate = AsyncMock(side_effect=ConnectionError("peer gone"))
    channel = MigrationChannel()
    channel.attach(transport)

    channel.send(_batch())
    channel.send(_batch())

    assert await channel.flush() == 0
    assert transport.emigrate.await_count == 2


@pytest.mark.asyncio
async def test_attach_delivers_through_hub():
    hub = LocalMigrationHub(2)
    sender, receiver = MigrationChannel(), MigrationChannel()
    sender.attach(hub.transport(0))
    receiver.attach(hub.transport(1))

    sender.send(_batch(source=0))
    assert await sender.flush() == 1
    assert sender.sent == 1

    batch = receiver.receive()
    assert batch is not None and batch.source_id == 0

    receiver.detach()
    sender.send(_batch(source=0))
    await sender.flush()
    assert receiver.receive() is None
