"""Garbage collection of expired tombstones.

Tombstones are kept for a long window so that a device syncing after a long
absence cannot revive an item deleted elsewhere. Past the window they are
dropped to bound storage growth.
"""

from __future__ import annotations

import logging

from travelsync.core.time_utils import DAY_MS
from travelsync.domain.models.selection import Selection, Snapshot

logger = logging.getLogger(__name__)

DELETED_RETENTION_DAYS = 365
DELETED_RETENTION_MS = DELETED_RETENTION_DAYS * DAY_MS


def should_keep(selection: Selection, now: int, retention_ms: int = DELETED_RETENTION_MS) -> bool:
    if not selection.deleted:
        return True
    # Undated legacy tombstones have unknown age and are never collected.
    if selection.updated_at is None:
        return True
    return now - selection.updated_at <= retention_ms


def prune_tombstones(
    snapshot: Snapshot, now: int, retention_ms: int = DELETED_RETENTION_MS
) -> tuple[Snapshot, int]:
    """Drop expired tombstones.

    Returns:
        The pruned snapshot and the number of records removed.
    """
    removed = 0
    categories = {}
    for category, items in snapshot.categories.items():
        kept = tuple(item for item in items if should_keep(item, now, retention_ms))
        removed += len(items) - len(kept)
        categories[category] = kept

    if not removed:
        return snapshot, 0

    logger.debug("tombstones_collected", extra={"removed": removed})
    return Snapshot(categories), removed


def collect_tombstones(
    snapshot: Snapshot, now: int, retention_ms: int = DELETED_RETENTION_MS
) -> Snapshot:
    return prune_tombstones(snapshot, now, retention_ms)[0]
