"""Reconcile a local and a remote snapshot.

Conflicts are resolved per item id with last-writer-wins on ``updatedAt``.
Timestamps come from each device's wall clock, so a device whose clock runs
ahead wins conflicts it should lose; this is a known limitation of the
scheme, not something the merge tries to correct.
"""

from __future__ import annotations

import logging

from travelsync.core.time_utils import now_ms
from travelsync.domain.models.selection import ALL_CATEGORIES, Category, Selection, Snapshot
from travelsync.domain.services.tombstones import DELETED_RETENTION_MS, collect_tombstones

logger = logging.getLogger(__name__)


def resolve(local: Selection, remote: Selection) -> Selection:
    """Pick the winner for one id present on both sides.

    Remote wins only when strictly newer; equal timestamps keep the local
    record even when the statuses differ.
    """
    if remote.timestamp > local.timestamp:
        return remote
    return local


def merge(
    local: Snapshot,
    remote: Snapshot,
    *,
    now: int | None = None,
    retention_ms: int = DELETED_RETENTION_MS,
) -> Snapshot:
    """Merge two snapshots into a new one.

    Every id from either side survives, resolved to its most recently
    updated version, except tombstones older than the retention window.
    Neither input is modified.
    """
    merged: dict[Category, tuple[Selection, ...]] = {}
    replaced = added = 0

    for category in ALL_CATEGORIES:
        working: dict[str, Selection] = {item.id: item for item in local.items(category)}

        for remote_item in remote.items(category):
            local_item = working.get(remote_item.id)
            if local_item is None:
                working[remote_item.id] = remote_item
                added += 1
                continue
            winner = resolve(local_item, remote_item)
            if winner is not local_item:
                working[remote_item.id] = winner
                replaced += 1

        merged[category] = tuple(working.values())

    result = collect_tombstones(
        Snapshot(merged), now if now is not None else now_ms(), retention_ms
    )
    logger.debug(
        "snapshots_merged",
        extra={
            "local_items": local.count(),
            "remote_items": remote.count(),
            "merged_items": result.count(),
            "added_from_remote": added,
            "replaced_by_remote": replaced,
        },
    )
    return result
