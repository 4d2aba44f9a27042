"""Per-category progress counters."""

from __future__ import annotations

from dataclasses import dataclass

from travelsync.domain.models.selection import Category, Snapshot, Status


@dataclass(frozen=True)
class CategoryStats:
    visited: int
    bucket_list: int
    total: int
    percentage: int


def category_stats(snapshot: Snapshot, category: Category, total: int) -> CategoryStats:
    """Count live marks in ``category``; tombstones are ignored.

    ``percentage`` is visited/total rounded half-up to an integer, or 0 when
    the category total is unknown.
    """
    live = [item for item in snapshot.items(category) if item.is_live]
    visited = sum(1 for item in live if item.status == Status.VISITED)
    bucket_list = sum(1 for item in live if item.status == Status.BUCKET_LIST)
    percentage = int(visited * 100 / total + 0.5) if total > 0 else 0
    return CategoryStats(visited=visited, bucket_list=bucket_list, total=total, percentage=percentage)
