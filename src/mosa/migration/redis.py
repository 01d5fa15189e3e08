"""Redis-backed transport for instances running in separate processes."""

from __future__ import annotations

import asyncio
import pickle
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog

from mosa.candidates.base import Candidate
from mosa.errors import ConfigurationError, TransportError
from mosa.migration.transport import PRIMARY_ID, Listener

if TYPE_CHECKING:
    from mosa.migration.channel import MigrationBatch

logger = structlog.get_logger()


class RedisTransport:
    """Mailboxes as Redis lists.

    Each instance owns an inbox list; a background task blocks on ``BRPOP``
    and hands arriving batches to the registered listeners. Archives share
    one list read by the primary. Output variables live in a hash per
    instance. Payloads are pickled, so every instance must run the same code.
    """

    def __init__(
        self,
        redis_client: Any,
        instance_id: int,
        num_instances: int,
        prefix: str = "mosa",
        run_id: str = "default",
        poll_timeout: float = 1.0,
        archive_timeout: float | None = None,
    ) -> None:
        if not 0 <= instance_id < num_instances:
            raise ConfigurationError(f"instance_id {instance_id} out of range for {num_instances} instances")
        self._redis = redis_client
        self.instance_id = instance_id
        self.num_instances = num_instances
        self._prefix = prefix
        self._run_id = run_id
        self._poll_timeout = poll_timeout
        self._archive_timeout = archive_timeout
        self._listeners: list[Listener] = []
        self._task: asyncio.Task[None] | None = None

    def _key(self, *parts: str) -> str:
        return ":".join([self._prefix, self._run_id, *parts])

    @property
    def is_primary(self) -> bool:
        return self.instance_id == PRIMARY_ID

    # -- migration --------------------------------------------------------

    async def emigrate(self, batch: MigrationBatch) -> None:
        target = (self.instance_id + 1) % self.num_instances
        if target == self.instance_id:
            return
        try:
            await self._redis.lpush(self._key("inbox", str(target)), pickle.dumps(batch))
        except Exception as exc:
            raise TransportError(f"emigration to instance {target} failed: {exc}") from exc

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._listen())

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
        if not self._listeners and self._task is not None:
            self._task.cancel()
            self._task = None

    async def _listen(self) -> None:
        key = self._key("inbox", str(self.instance_id))
        while True:
            try:
                item = await self._redis.brpop(key, timeout=self._poll_timeout)
            except Exception as exc:
                logger.warning("immigration_poll_failed", instance_id=self.instance_id, error=str(exc))
                await asyncio.sleep(self._poll_timeout)
                continue
            if item is None:
                continue
            try:
                batch = pickle.loads(item[1])
            except Exception as exc:
                logger.warning("immigration_decode_failed", instance_id=self.instance_id, error=str(exc))
                continue
            for listener in list(self._listeners):
                try:
                    listener(batch)
                except Exception as exc:
                    logger.warning("immigration_dispatch_failed", instance_id=self.instance_id, error=str(exc))

    # -- reconciliation ---------------------------------------------------

    async def send_archive(self, peer_id: int, archive: Sequence[Candidate]) -> None:
        if peer_id != PRIMARY_ID:
            raise ConfigurationError(f"archives can only be sent to the primary, got {peer_id}")
        payload = pickle.dumps((self.instance_id, [c.snapshot() for c in archive]))
        await self._redis.lpush(self._key("archives"), payload)

    async def collect_archives(self) -> list[list[Candidate]]:
        if not self.is_primary:
            raise ConfigurationError("only the primary instance collects archives")
        loop = asyncio.get_running_loop()
        deadline = None if self._archive_timeout is None else loop.time() + self._archive_timeout
        archives: list[list[Candidate]] = []
        while len(archives) < self.num_instances - 1:
            if deadline is not None and loop.time() >= deadline:
                logger.warning(
                    "archive_collection_timeout",
                    received=len(archives),
                    expected=self.num_instances - 1,
                )
                break
            item = await self._redis.brpop(self._key("archives"), timeout=self._poll_timeout)
            if item is None:
                continue
            _, archive = pickle.loads(item[1])
            archives.append(archive)
        return archives

    async def track_output_variable(self, name: str, value: Any) -> None:
        await self._redis.hset(self._key("vars", str(self.instance_id)), name, pickle.dumps(value))
