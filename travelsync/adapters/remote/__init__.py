"""Remote snapshot store adapter."""

from travelsync.adapters.remote.client import RemoteSnapshotClient, RemoteStoreError

__all__ = ["RemoteSnapshotClient", "RemoteStoreError"]
