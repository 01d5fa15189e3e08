"""Mailbox for migration batches exchanged between search instances."""

from __future__ import annotations

import uuid
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from mosa.candidates.base import Candidate
from mosa.migration.transport import Transport

logger = structlog.get_logger()


@dataclass(frozen=True)
class MigrationBatch:
    """Immutable snapshot of emigrants sent by one instance."""

    source_id: int
    generation: int
    candidates: tuple[Candidate, ...]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def of(cls, source_id: int, generation: int, candidates: Iterable[Candidate]) -> MigrationBatch:
        """Snapshot ``candidates`` so the receiver never shares objects with the sender."""
        return cls(source_id, generation, tuple(c.snapshot() for c in candidates))

    def __len__(self) -> int:
        return len(self.candidates)


class MigrationChannel:
    """Outbox plus bounded inbox for one search instance.

    ``send`` and ``receive`` never block and never raise. The inbox is a
    ``deque``, so a transport listener running on another thread can append
    while the search loop drains it. When the inbox is full the oldest
    batch is dropped.
    """

    def __init__(self, capacity: int = 16) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._inbox: deque[MigrationBatch] = deque(maxlen=capacity)
        self._outbox: deque[MigrationBatch] = deque()
        self._transport: Transport | None = None
        self.dropped = 0
        self.sent = 0

    # -- inbound ----------------------------------------------------------

    def offer(self, batch: MigrationBatch) -> None:
        """Listener callback: queue an arriving batch."""
        if not batch.candidates:
            return
        if len(self._inbox) == self.capacity:
            self.dropped += 1
            logger.debug("immigrant_batch_dropped", batch_id=self._inbox[0].id, capacity=self.capacity)
        self._inbox.append(batch)

    def receive(self) -> MigrationBatch | None:
        """Pop the oldest pending batch, or None when nothing is queued."""
        try:
            return self._inbox.popleft()
        except IndexError:
            return None

    @property
    def pending(self) -> int:
        return len(self._inbox)

    # -- outbound ---------------------------------------------------------

    def send(self, batch: MigrationBatch) -> None:
        """Queue ``batch`` for delivery. Always succeeds locally."""
        if batch.candidates:
            self._outbox.append(batch)

    async def flush(self) -> int:
        """Hand queued batches to the transport. Returns how many were delivered.

        Delivery is best effort: a failing transport drops the batch.
        """
        delivered = 0
        while self._outbox:
            batch = self._outbox.popleft()
            if self._transport is None:
                logger.debug("emigration_skipped", reason="no_transport", batch_id=batch.id)
                continue
            try:
                await self._transport.emigrate(batch)
            except Exception as exc:
                logger.warning("emigration_failed", batch_id=batch.id, error=str(exc))
                continue
            delivered += 1
        self.sent += delivered
        return delivered

    # -- wiring -----------------------------------------------------------

    def attach(self, transport: Transport) -> None:
        """Register as the transport's inbound listener."""
        self._transport = transport
        transport.add_listener(self.offer)

    def detach(self) -> None:
        if self._transport is not None:
            self._transport.remove_listener(self.offer)
