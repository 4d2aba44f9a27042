"""SQLite repository adapters.

This package contains repository adapters that implement the store
protocols using SQLite/Peewee as the persistence layer.
"""

from travelsync.infrastructure.persistence.sqlite.repositories.selection_blob_repository import (
    SqliteBlobStoreAdapter,
)

__all__ = ["SqliteBlobStoreAdapter"]
