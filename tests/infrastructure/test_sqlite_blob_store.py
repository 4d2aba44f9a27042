"""Tests for the SQLite-backed local blob store."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from travelsync.db.models import SelectionBlob
from travelsync.db.session import DatabaseSessionManager
from travelsync.infrastructure.persistence.memory import InMemoryBlobStore
from travelsync.infrastructure.persistence.sqlite.repositories.selection_blob_repository import (
    SqliteBlobStoreAdapter,
)


class TestSqliteBlobStore(unittest.IsolatedAsyncioTestCase):
    """Test suite for SqliteBlobStoreAdapter."""

    async def asyncSetUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.session = DatabaseSessionManager(str(Path(self._tmp.name) / "local.db"))
        self.session.migrate()
        self.store = SqliteBlobStoreAdapter(self.session)

    async def asyncTearDown(self) -> None:
        self.session.close()
        self._tmp.cleanup()

    def _stored_version(self, key: str) -> int | None:
        with self.session.connection_context():
            blob = SelectionBlob.get_or_none(SelectionBlob.key == key)
        return blob.server_version if blob else None

    async def test_missing_key_reads_none(self) -> None:
        self.assertIsNone(await self.store.async_read_blob("travelmap_selections"))

    async def test_write_then_read(self) -> None:
        await self.store.async_write_blob("travelmap_selections", '{"countries": []}')

        self.assertEqual(
            await self.store.async_read_blob("travelmap_selections"), '{"countries": []}'
        )

    async def test_overwrite_bumps_version(self) -> None:
        await self.store.async_write_blob("k", "one")
        first = self._stored_version("k")

        await self.store.async_write_blob("k", "two")
        second = self._stored_version("k")

        self.assertEqual(await self.store.async_read_blob("k"), "two")
        self.assertIsNotNone(first)
        self.assertGreater(second, first)

    async def test_keys_are_independent(self) -> None:
        await self.store.async_write_blob("device-a", "a")
        await self.store.async_write_blob("device-b", "b")

        await self.store.async_remove_blob("device-a")

        self.assertIsNone(await self.store.async_read_blob("device-a"))
        self.assertEqual(await self.store.async_read_blob("device-b"), "b")

    async def test_remove_missing_key_is_ignored(self) -> None:
        await self.store.async_remove_blob("absent")

        self.assertIsNone(await self.store.async_read_blob("absent"))
        self.assertIsNone(self._stored_version("absent"))


class TestInMemoryBlobStore(unittest.IsolatedAsyncioTestCase):
    """Test suite for InMemoryBlobStore."""

    async def test_round_trip_and_remove(self) -> None:
        store = InMemoryBlobStore()

        await store.async_write_blob("k", "v")
        self.assertEqual(await store.async_read_blob("k"), "v")
        self.assertIsNone(await store.async_read_blob("other"))

        await store.async_remove_blob("k")
        await store.async_remove_blob("k")
        self.assertIsNone(await store.async_read_blob("k"))
