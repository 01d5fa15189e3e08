"""Migration of candidates between cooperating search instances."""

from __future__ import annotations

from mosa.migration.channel import MigrationBatch, MigrationChannel
from mosa.migration.transport import PRIMARY_ID, LocalMigrationHub, LocalTransport, Transport

__all__ = [
    "PRIMARY_ID",
    "LocalMigrationHub",
    "LocalTransport",
    "MigrationBatch",
    "MigrationChannel",
    "Transport",
]
