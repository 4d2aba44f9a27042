"""In-process blob store for tests and ephemeral sessions."""

from __future__ import annotations


class InMemoryBlobStore:
    """Dict-backed LocalBlobStore."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._blobs: dict[str, str] = dict(initial or {})

    async def async_read_blob(self, key: str) -> str | None:
        return self._blobs.get(key)

    async def async_write_blob(self, key: str, raw: str) -> None:
        self._blobs[key] = raw

    async def async_remove_blob(self, key: str) -> None:
        self._blobs.pop(key, None)
