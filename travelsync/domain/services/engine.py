"""Single entry point for the selection core.

``SelectionEngine`` binds the pure functions of the core to one set of
reference data, one retention window and one clock so that callers never
reach for module-level lookup tables.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from travelsync.core.time_utils import now_ms
from travelsync.domain.models.selection import Category, Snapshot, Status
from travelsync.domain.services.merge import merge
from travelsync.domain.services.migration import migrate
from travelsync.domain.services.propagation import RelationshipPropagator
from travelsync.domain.services.reference import ReferenceData
from travelsync.domain.services.statistics import CategoryStats, category_stats
from travelsync.domain.services.tombstones import DELETED_RETENTION_MS, prune_tombstones
from travelsync.domain.services.transitions import (
    SetStatus,
    Toggle,
    TransitionAction,
    apply_transition,
    current_status,
)


class SelectionEngine:
    """Pure snapshot operations bound to reference data, retention and clock.

    Example:
        ```python
        engine = SelectionEngine(load_reference_data("places.json"))
        snapshot = engine.toggle(snapshot, Category.WORLD_CITIES, "paris-fr")
        merged = engine.merge(snapshot, remote_snapshot)
        ```

    """

    def __init__(
        self,
        reference: ReferenceData | None = None,
        *,
        retention_ms: int = DELETED_RETENTION_MS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.reference = reference or ReferenceData.empty()
        self.retention_ms = retention_ms
        self.clock = clock
        self.propagator = RelationshipPropagator(self.reference)

    def migrate(self, raw: Mapping[str, Any] | Snapshot | None) -> Snapshot:
        return migrate(raw, reference=self.reference)

    def collect_tombstones(self, snapshot: Snapshot, now: int | None = None) -> Snapshot:
        return self.prune_tombstones(snapshot, now)[0]

    def prune_tombstones(self, snapshot: Snapshot, now: int | None = None) -> tuple[Snapshot, int]:
        return prune_tombstones(snapshot, self._now(now), self.retention_ms)

    def merge(self, local: Snapshot, remote: Snapshot, now: int | None = None) -> Snapshot:
        return merge(local, remote, now=self._now(now), retention_ms=self.retention_ms)

    def apply_transition(
        self,
        snapshot: Snapshot,
        category: Category,
        item_id: str,
        action: TransitionAction,
        now: int | None = None,
    ) -> Snapshot:
        return apply_transition(
            snapshot,
            category,
            item_id,
            action,
            now=self._now(now),
            propagator=self.propagator,
        )

    def propagate(
        self, snapshot: Snapshot, category: Category, item_id: str, now: int | None = None
    ) -> Snapshot:
        return self.propagator.propagate(snapshot, category, item_id, self._now(now))

    def toggle(
        self, snapshot: Snapshot, category: Category, item_id: str, now: int | None = None
    ) -> Snapshot:
        return self.apply_transition(snapshot, category, item_id, Toggle(), now)

    def set_status(
        self,
        snapshot: Snapshot,
        category: Category,
        item_id: str,
        status: Status | None,
        *,
        visited_date: str | None = None,
        notes: str | None = None,
        now: int | None = None,
    ) -> Snapshot:
        action = SetStatus(status=status, visited_date=visited_date, notes=notes)
        return self.apply_transition(snapshot, category, item_id, action, now)

    def status_of(self, snapshot: Snapshot, category: Category, item_id: str) -> Status:
        return current_status(snapshot, category, item_id)

    def stats(self, snapshot: Snapshot, category: Category) -> CategoryStats:
        return category_stats(snapshot, category, self.reference.total_for(category))

    def _now(self, now: int | None) -> int:
        return now if now is not None else self.clock()
