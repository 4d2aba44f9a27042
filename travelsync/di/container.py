"""Dependency injection container for wiring components.

Builds the selection engine, the SQLite-backed local store and the remote
snapshot client from one ``AppConfig``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from travelsync.adapters.remote.client import RemoteSnapshotClient
from travelsync.application.use_cases.load_local_selections import LoadLocalSelectionsUseCase
from travelsync.application.use_cases.sync_selections import SyncSelectionsUseCase
from travelsync.db.session import DatabaseSessionManager
from travelsync.domain.services.engine import SelectionEngine
from travelsync.domain.services.reference import ReferenceData, load_reference_data
from travelsync.infrastructure.persistence.sqlite.repositories.selection_blob_repository import (
    SqliteBlobStoreAdapter,
)

if TYPE_CHECKING:
    import httpx

    from travelsync.config import AppConfig
    from travelsync.protocols import LocalBlobStore, RemoteSnapshotStore

logger = logging.getLogger(__name__)


class Container:
    """Dependency injection container.

    Components are created on first use and reused afterwards. The remote
    client is returned unopened; callers own its ``async with`` lifetime.

    Example:
        ```python
        container = Container(load_config())
        local = await container.load_local_selections_use_case().execute()

        client = container.remote_client()
        if client is not None:
            async with client as remote:
                sync = container.sync_selections_use_case(remote)
                outcome = await sync.execute(SyncSelectionsCommand(user_id, local))

        container.close()
        ```

    """

    def __init__(
        self,
        config: AppConfig,
        *,
        engine: SelectionEngine | None = None,
        remote_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the container.

        Args:
            config: Loaded application configuration.
            engine: Optional prebuilt engine, e.g. with CLI overrides applied.
            remote_transport: Optional httpx transport for the remote client.

        """
        self._config = config
        self._remote_transport = remote_transport

        # Lazy-initialized components
        self._engine: SelectionEngine | None = engine
        self._reference_data: ReferenceData | None = None
        self._session_manager: DatabaseSessionManager | None = None
        self._blob_store: SqliteBlobStoreAdapter | None = None

        # Lazy-initialized use cases
        self._load_local_selections_use_case: LoadLocalSelectionsUseCase | None = None

    @property
    def config(self) -> AppConfig:
        return self._config

    def reference_data(self) -> ReferenceData:
        """Get or load the place catalog.

        Returns:
            Catalog read from the configured path, or an empty one when no
            path is set.

        Raises:
            ReferenceDataError: If the configured file cannot be loaded.

        """
        if self._reference_data is None:
            path = self._config.reference.data_path
            self._reference_data = load_reference_data(path) if path else ReferenceData.empty()
        return self._reference_data

    def engine(self) -> SelectionEngine:
        """Get or create the selection engine.

        Returns:
            Engine using the configured catalog and tombstone retention.

        """
        if self._engine is None:
            self._engine = SelectionEngine(
                self.reference_data(),
                retention_ms=self._config.sync.tombstone_retention_ms,
            )
        return self._engine

    def session_manager(self) -> DatabaseSessionManager:
        """Get or create the database session, creating tables on first use.

        Returns:
            Session manager for the configured SQLite file.

        """
        if self._session_manager is None:
            self._session_manager = DatabaseSessionManager(
                self._config.runtime.db_path,
                operation_timeout=self._config.database.operation_timeout,
                max_retries=self._config.database.max_retries,
            )
            self._session_manager.migrate()
        return self._session_manager

    def blob_store(self) -> LocalBlobStore:
        """Get or create the local blob store.

        Returns:
            SQLite blob store adapter wrapping the session manager.

        """
        if self._blob_store is None:
            self._blob_store = SqliteBlobStoreAdapter(self.session_manager())
        return self._blob_store

    def load_local_selections_use_case(self) -> LoadLocalSelectionsUseCase:
        """Get or create the LoadLocalSelectionsUseCase.

        Returns:
            Use case reading and writing the configured store key.

        """
        if self._load_local_selections_use_case is None:
            self._load_local_selections_use_case = LoadLocalSelectionsUseCase(
                self.blob_store(),
                self.engine(),
                self._config.runtime.local_store_key,
            )
        return self._load_local_selections_use_case

    def remote_client(self) -> RemoteSnapshotClient | None:
        """Create a remote snapshot client from the sync settings.

        Returns:
            An unopened client, or None if no remote URL is configured.

        """
        sync = self._config.sync
        if not sync.remote_enabled:
            return None
        return RemoteSnapshotClient(
            sync.remote_url,
            sync.remote_api_key,
            sync.remote_timeout_sec,
            max_retries=sync.remote_max_retries,
            transport=self._remote_transport,
        )

    def sync_selections_use_case(self, remote_store: RemoteSnapshotStore) -> SyncSelectionsUseCase:
        """Create a SyncSelectionsUseCase bound to an open remote store.

        Returns:
            Use case that persists merged snapshots through the local store.

        """
        return SyncSelectionsUseCase(
            remote_store,
            self.engine(),
            self.load_local_selections_use_case(),
        )

    def close(self) -> None:
        if self._session_manager is not None:
            self._session_manager.close()
            logger.debug("container_closed")
