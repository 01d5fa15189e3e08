"""Transport protocol and the in-process hub for cooperating instances."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from mosa.candidates.base import Candidate
from mosa.errors import ConfigurationError

if TYPE_CHECKING:
    from mosa.migration.channel import MigrationBatch

logger = structlog.get_logger()

PRIMARY_ID = 0

Listener = Callable[["MigrationBatch"], None]


class Transport(Protocol):
    """Cross-instance delivery used by the migration channel and reconciliation."""

    instance_id: int

    @property
    def is_primary(self) -> bool: ...

    async def emigrate(self, batch: MigrationBatch) -> None: ...
    def add_listener(self, listener: Listener) -> None: ...
    def remove_listener(self, listener: Listener) -> None: ...
    async def send_archive(self, peer_id: int, archive: Sequence[Candidate]) -> None: ...
    async def collect_archives(self) -> list[list[Candidate]]: ...
    async def track_output_variable(self, name: str, value: Any) -> None: ...


class LocalMigrationHub:
    """Shared state for instances running in one event loop.

    Emigrants travel along a ring: instance ``i`` sends to ``(i + 1) % n``.
    Archives flow to the primary (instance 0).
    """

    def __init__(self, num_instances: int, archive_timeout: float | None = None) -> None:
        if num_instances < 1:
            raise ConfigurationError(f"num_instances must be at least 1, got {num_instances}")
        self.num_instances = num_instances
        self.archive_timeout = archive_timeout
        self.listeners: dict[int, list[Listener]] = {i: [] for i in range(num_instances)}
        self.archives: asyncio.Queue[tuple[int, list[Candidate]]] = asyncio.Queue()
        self.output_variables: dict[int, dict[str, Any]] = {i: {} for i in range(num_instances)}

    def transport(self, instance_id: int) -> LocalTransport:
        if not 0 <= instance_id < self.num_instances:
            raise ConfigurationError(
                f"instance_id {instance_id} out of range for {self.num_instances} instances"
            )
        return LocalTransport(self, instance_id)

    def neighbour(self, instance_id: int) -> int:
        return (instance_id + 1) % self.num_instances

    def deliver(self, target: int, batch: MigrationBatch) -> int:
        listeners = list(self.listeners[target])
        if not listeners:
            logger.debug("batch_undeliverable", target=target, batch_id=batch.id)
        for listener in listeners:
            listener(batch)
        return len(listeners)


class LocalTransport:
    """One instance's view of a :class:`LocalMigrationHub`."""

    def __init__(self, hub: LocalMigrationHub, instance_id: int) -> None:
        self._hub = hub
        self.instance_id = instance_id

    @property
    def is_primary(self) -> bool:
        return self.instance_id == PRIMARY_ID

    async def emigrate(self, batch: MigrationBatch) -> None:
        target = self._hub.neighbour(self.instance_id)
        if target == self.instance_id:
            return
        self._hub.deliver(target, batch)

    def add_listener(self, listener: Listener) -> None:
        self._hub.listeners[self.instance_id].append(listener)

    def remove_listener(self, listener: Listener) -> None:
        listeners = self._hub.listeners[self.instance_id]
        if listener in listeners:
            listeners.remove(listener)

    async def send_archive(self, peer_id: int, archive: Sequence[Candidate]) -> None:
        if peer_id != PRIMARY_ID:
            raise ConfigurationError(f"archives can only be sent to the primary, got {peer_id}")
        await self._hub.archives.put((self.instance_id, [c.snapshot() for c in archive]))

    async def collect_archives(self) -> list[list[Candidate]]:
        if not self.is_primary:
            raise ConfigurationError("only the primary instance collects archives")
        archives: list[list[Candidate]] = []
        for _ in range(self._hub.num_instances - 1):
            try:
                _, archive = await asyncio.wait_for(self._hub.archives.get(), self._hub.archive_timeout)
            except TimeoutError:
                logger.warning(
                    "archive_collection_timeout",
                    received=len(archives),
                    expected=self._hub.num_instances - 1,
                )
                break
            archives.append(archive)
        return archives

    async def track_output_variable(self, name: str, value: Any) -> None:
        self._hub.output_variables[self.instance_id][name] = value
