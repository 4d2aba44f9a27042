"""Derive visits on parent places when a city is marked visited.

A US city implies its state. A world city implies its country and, for
cities inside a US state, that state as well. Derived marks only ever create
a record or revive a tombstone; a live parent is never overwritten,
whatever its status.
"""

from __future__ import annotations

import logging

from travelsync.domain.models.selection import Category, Selection, Snapshot, Status
from travelsync.domain.services.reference import ReferenceData

logger = logging.getLogger(__name__)

class RelationshipPropagator:
    """Applies city -> state/country propagation using prebuilt lookup tables."""

    def __init__(self, reference: ReferenceData) -> None:
        self._reference = reference

    @property
    def reference(self) -> ReferenceData:
        return self._reference

    def parents_of(self, category: Category, item_id: str) -> list[tuple[Category, str]]:
        """Parent places implied by visiting ``item_id``, in application order."""
        parents: list[tuple[Category, str]] = []
        if category == Category.US_CITIES:
            state_code = self._reference.us_city_states.get(item_id)
            if state_code:
                parents.append((Category.STATES, state_code))
        elif category == Category.WORLD_CITIES:
            country_code = self._reference.world_city_countries.get(item_id)
            if country_code and country_code in self._reference.country_codes:
                parents.append((Category.COUNTRIES, country_code))
            state_code = self._reference.world_city_states.get(item_id)
            if state_code:
                parents.append((Category.STATES, state_code))
        return parents

    def propagate(self, snapshot: Snapshot, category: Category, item_id: str, now: int) -> Snapshot:
        """Mark the parents of a just-visited child as visited.

        Does nothing unless the child record is live and ``visited``.
        """
        child = snapshot.find(category, item_id)
        if child is None or child.is_tombstone or child.status != Status.VISITED:
            return snapshot

        result = snapshot
        for parent_category, parent_id in self.parents_of(category, item_id):
            existing = result.find(parent_category, parent_id)
            if existing is not None and existing.is_live:
                continue
            result = result.with_selection(
                parent_category,
                Selection(id=parent_id, status=Status.VISITED, updated_at=now, deleted=False),
            )
            logger.debug(
                "parent_visit_propagated",
                extra={
                    "category": parent_category.value,
                    "item_id": parent_id,
                    "child_category": category.value,
                    "child_id": item_id,
                    "revived": existing is not None,
                },
            )
        return result
