"""Peewee ORM models for the local selection store."""

from __future__ import annotations

import datetime as _dt
from typing import Any

import peewee

from travelsync.core.time_utils import UTC

# Initialised with the concrete database instance by DatabaseSessionManager.
database_proxy: peewee.Database = peewee.DatabaseProxy()


def _utcnow() -> _dt.datetime:
    return _dt.datetime.now(UTC)


def _next_server_version() -> int:
    return int(_utcnow().timestamp() * 1000)


class BaseModel(peewee.Model):
    """Base Peewee model bound to the lazily initialised database proxy."""

    def save(self, *args: Any, **kwargs: Any) -> int:
        """Keep updated_at fresh and server_version strictly increasing on every save."""
        now = _utcnow()

        if hasattr(self, "updated_at"):
            self.updated_at = now

        if hasattr(self, "server_version"):
            current = getattr(self, "server_version", 0) or 0
            next_version = int(now.timestamp() * 1000)
            if next_version <= current:
                next_version = current + 1
            self.server_version = next_version

        return super().save(*args, **kwargs)

    class Meta:
        database = database_proxy
        legacy_table_names = False


class SelectionBlob(BaseModel):
    """One serialized snapshot per store key (one per user/device)."""

    key = peewee.TextField(primary_key=True)
    payload = peewee.TextField()
    server_version = peewee.BigIntegerField(default=_next_server_version)
    updated_at = peewee.DateTimeField(default=_utcnow)
    created_at = peewee.DateTimeField(default=_utcnow)

    class Meta:
        table_name = "selection_blobs"


ALL_MODELS: tuple[type[BaseModel], ...] = (SelectionBlob,)
