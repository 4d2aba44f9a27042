"""Use case for loading, normalizing and saving the device-local snapshot."""

from __future__ import annotations

import json
import logging

from travelsync.domain.models.selection import Snapshot
from travelsync.domain.services.engine import SelectionEngine
from travelsync.domain.services.migration import needs_migration
from travelsync.protocols import LocalBlobStore

logger = logging.getLogger(__name__)

DEFAULT_STORE_KEY = "travelmap_selections"


def serialize_snapshot(snapshot: Snapshot) -> str:
    """Canonical JSON text for a snapshot; equal snapshots serialize equally."""
    return json.dumps(snapshot.to_dict(), sort_keys=True, separators=(",", ":"))


class LoadLocalSelectionsUseCase:
    """Read the local snapshot, upgrade it, and keep storage in canonical form.

    Example:
        ```python
        use_case = LoadLocalSelectionsUseCase(blob_store, SelectionEngine(reference))
        snapshot = await use_case.execute()
        ```

    """

    def __init__(
        self,
        blob_store: LocalBlobStore,
        engine: SelectionEngine,
        store_key: str = DEFAULT_STORE_KEY,
    ) -> None:
        self._blob_store = blob_store
        self._engine = engine
        self._store_key = store_key

    @property
    def store_key(self) -> str:
        return self._store_key

    async def execute(self) -> Snapshot:
        """Load the stored snapshot.

        A missing or unreadable blob yields the empty snapshot. When
        migration ran or expired tombstones were dropped the cleaned snapshot
        is written back.
        """
        logger.info("load_local_selections_started", extra={"store_key": self._store_key})

        raw_text = await self._blob_store.async_read_blob(self._store_key)
        if raw_text is None:
            logger.info("load_local_selections_empty", extra={"store_key": self._store_key})
            return Snapshot.empty()

        try:
            raw = json.loads(raw_text)
        except json.JSONDecodeError as exc:
            logger.warning(
                "local_selections_unparseable",
                extra={"store_key": self._store_key, "error": str(exc)},
            )
            return Snapshot.empty()
        if not isinstance(raw, dict):
            logger.warning(
                "local_selections_not_an_object",
                extra={"store_key": self._store_key, "type": type(raw).__name__},
            )
            return Snapshot.empty()

        migrated = needs_migration(raw)
        snapshot = self._engine.migrate(raw)
        snapshot, removed = self._engine.prune_tombstones(snapshot)

        if migrated or removed:
            await self.save(snapshot)

        logger.info(
            "load_local_selections_completed",
            extra={
                "store_key": self._store_key,
                "count": snapshot.count(),
                "migrated": migrated,
                "tombstones_removed": removed,
            },
        )
        return snapshot

    async def save(self, snapshot: Snapshot) -> None:
        await self._blob_store.async_write_blob(self._store_key, serialize_snapshot(snapshot))
        logger.debug(
            "local_selections_saved",
            extra={"store_key": self._store_key, "count": snapshot.count()},
        )

    async def clear(self) -> None:
        """Forget the local snapshot, e.g. on sign-out."""
        await self._blob_store.async_remove_blob(self._store_key)
        logger.info("local_selections_cleared", extra={"store_key": self._store_key})
