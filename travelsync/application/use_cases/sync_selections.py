"""Use case for reconciling the local snapshot with the remote store.

One cycle reads the remote snapshot, upgrades it, merges it with the local
one, uploads the result and persists it locally. A remote failure aborts the
cycle before anything is written, so the caller keeps its local snapshot.
Any other failure leaves the use case in the error state and propagates.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass

from travelsync.adapters.remote.client import RemoteStoreError
from travelsync.application.dto.sync_dto import SyncOutcome, SyncStatus
from travelsync.application.use_cases.load_local_selections import (
    LoadLocalSelectionsUseCase,
    serialize_snapshot,
)
from travelsync.core.logging_utils import generate_correlation_id
from travelsync.domain.models.selection import Snapshot
from travelsync.domain.services.engine import SelectionEngine
from travelsync.protocols import RemoteSnapshotStore

logger = logging.getLogger(__name__)


@dataclass
class SyncSelectionsCommand:
    """Command for one sync cycle."""

    user_id: str
    local: Snapshot

    def __post_init__(self) -> None:
        if not self.user_id or not self.user_id.strip():
            msg = "user_id cannot be empty"
            raise ValueError(msg)


class SyncSelectionsUseCase:
    """Merge-and-push synchronization against a ``RemoteSnapshotStore``.

    Cycles on one instance run one at a time. Retrying is left to the remote
    adapter; this layer reports failure and leaves the next trigger to the
    caller.
    """

    def __init__(
        self,
        remote_store: RemoteSnapshotStore,
        engine: SelectionEngine,
        local_selections: LoadLocalSelectionsUseCase | None = None,
    ) -> None:
        self._remote = remote_store
        self._engine = engine
        self._local = local_selections
        self._status = SyncStatus.IDLE
        self._last_synced: dict[str, str] = {}
        self._lock = asyncio.Lock()

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def is_syncing(self) -> bool:
        return self._status == SyncStatus.SYNCING

    async def execute(self, command: SyncSelectionsCommand) -> SyncOutcome:
        async with self._lock:
            self._status = SyncStatus.SYNCING
            correlation_id = generate_correlation_id()
            logger.info(
                "sync_selections_started",
                extra={
                    "user_id": command.user_id,
                    "local_count": command.local.count(),
                    "correlation_id": correlation_id,
                },
            )
            try:
                raw_remote = await self._remote.fetch_snapshot(command.user_id)
                if raw_remote is not None:
                    self._last_synced[command.user_id] = json.dumps(
                        raw_remote, sort_keys=True, separators=(",", ":")
                    )
                remote = self._engine.migrate(raw_remote)
                merged = self._engine.merge(command.local, remote)
                uploaded = await self._upload(command.user_id, merged)
            except RemoteStoreError as exc:
                self._status = SyncStatus.ERROR
                logger.warning(
                    "sync_selections_failed",
                    extra={
                        "user_id": command.user_id,
                        "correlation_id": correlation_id,
                        "error": str(exc),
                        "status_code": exc.status_code,
                    },
                )
                return SyncOutcome(success=False, snapshot=command.local, error=str(exc))
            except Exception:
                self._status = SyncStatus.ERROR
                logger.exception(
                    "sync_selections_unexpected_error",
                    extra={"user_id": command.user_id, "correlation_id": correlation_id},
                )
                raise

            try:
                if self._local is not None:
                    await self._local.save(merged)
            except Exception:
                self._status = SyncStatus.ERROR
                raise

            self._status = SyncStatus.IDLE
            logger.info(
                "sync_selections_completed",
                extra={
                    "user_id": command.user_id,
                    "correlation_id": correlation_id,
                    "remote_found": raw_remote is not None,
                    "merged_count": merged.count(),
                    "uploaded": uploaded,
                },
            )
            return SyncOutcome(success=True, snapshot=merged, uploaded=uploaded)

    async def push(self, user_id: str, snapshot: Snapshot) -> bool:
        """Upload a locally edited snapshot.

        Returns:
            True if an upload happened, False if the payload matched the
            last one synced for this user.

        Raises:
            RemoteStoreError: If the upload fails.
        """
        try:
            uploaded = await self._upload(user_id, snapshot)
        except Exception:
            self._status = SyncStatus.ERROR
            raise
        self._status = SyncStatus.IDLE
        return uploaded

    async def delete_remote(self, user_id: str) -> bool:
        """Delete the user's remote snapshot; False when the store refused."""
        try:
            await self._remote.delete_snapshot(user_id)
        except RemoteStoreError as exc:
            logger.warning(
                "remote_selections_delete_failed", extra={"user_id": user_id, "error": str(exc)}
            )
            return False
        self._last_synced.pop(user_id, None)
        logger.info("remote_selections_deleted", extra={"user_id": user_id})
        return True

    async def _upload(self, user_id: str, snapshot: Snapshot) -> bool:
        payload = serialize_snapshot(snapshot)
        if self._last_synced.get(user_id) == payload:
            logger.debug("sync_upload_skipped_unchanged", extra={"user_id": user_id})
            return False
        await self._remote.upsert_snapshot(user_id, snapshot.to_dict())
        self._last_synced[user_id] = payload
        return True
