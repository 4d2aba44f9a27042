"""SQLite implementation of the local blob store.

One row per store key holds the serialized snapshot for a user or device.
"""

from __future__ import annotations

from travelsync.db.models import SelectionBlob
from travelsync.infrastructure.persistence.sqlite.base import SqliteBaseRepository


class SqliteBlobStoreAdapter(SqliteBaseRepository):
    """Adapter exposing selection blobs through the LocalBlobStore protocol."""

    async def async_read_blob(self, key: str) -> str | None:
        def _read() -> str | None:
            blob = SelectionBlob.get_or_none(SelectionBlob.key == key)
            return blob.payload if blob else None

        return await self._execute(_read, operation_name="read_selection_blob", read_only=True)

    async def async_write_blob(self, key: str, raw: str) -> None:
        def _write() -> None:
            blob = SelectionBlob.get_or_none(SelectionBlob.key == key)
            if blob is None:
                SelectionBlob.create(key=key, payload=raw)
                return
            blob.payload = raw
            blob.save()

        await self._execute(_write, operation_name="write_selection_blob")

    async def async_remove_blob(self, key: str) -> None:
        def _remove() -> None:
            SelectionBlob.delete().where(SelectionBlob.key == key).execute()

        await self._execute(_remove, operation_name="remove_selection_blob")
