"""Protocol definitions for the stores surrounding the selection core.

The core itself is pure; these contracts describe the collaborators the
application layer reads from and writes to.
"""

from typing import Any, Protocol


class LocalBlobStore(Protocol):
    """Durable per-device key/value store holding serialized snapshots."""

    async def async_read_blob(self, key: str) -> str | None:
        """Read a blob.

        Returns:
            The raw JSON text, or None if nothing is stored under ``key``.

        """
        ...

    async def async_write_blob(self, key: str, raw: str) -> None:
        """Create or replace the blob stored under ``key``."""
        ...

    async def async_remove_blob(self, key: str) -> None:
        """Remove the blob stored under ``key``; missing keys are ignored."""
        ...


class RemoteSnapshotStore(Protocol):
    """Per-user snapshot storage on the server.

    Implementations raise ``RemoteStoreError`` for transport, auth or server
    failures. A missing snapshot is not an error.
    """

    async def fetch_snapshot(self, user_id: str) -> dict[str, Any] | None:
        """Fetch the stored snapshot.

        Returns:
            The raw snapshot mapping, or None when the user has none yet.

        """
        ...

    async def upsert_snapshot(self, user_id: str, snapshot: dict[str, Any]) -> None:
        """Replace the stored snapshot; repeating the call is harmless."""
        ...

    async def delete_snapshot(self, user_id: str) -> None:
        """Delete the stored snapshot."""
        ...
