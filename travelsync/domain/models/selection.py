"""Selection domain model.

This module defines the tracked categories, the per-place selection record
and the snapshot that groups every record a user owns by category.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class Category(str, Enum):
    """Current, closed set of tracked categories."""

    COUNTRIES = "countries"
    STATES = "states"
    TERRITORIES = "territories"
    NATIONAL_PARKS = "nationalParks"
    NATIONAL_MONUMENTS = "nationalMonuments"
    STATE_PARKS = "stateParks"
    FIVE_K_PEAKS = "fiveKPeaks"
    FOURTEENERS = "fourteeners"
    MUSEUMS = "museums"
    MLB_STADIUMS = "mlbStadiums"
    NFL_STADIUMS = "nflStadiums"
    NBA_STADIUMS = "nbaStadiums"
    NHL_STADIUMS = "nhlStadiums"
    SOCCER_STADIUMS = "soccerStadiums"
    F1_TRACKS = "f1Tracks"
    MARATHONS = "marathons"
    AIRPORTS = "airports"
    SKI_RESORTS = "skiResorts"
    THEME_PARKS = "themeParks"
    SURFING_RESERVES = "surfingReserves"
    WEIRD_AMERICANA = "weirdAmericana"
    US_CITIES = "usCities"
    WORLD_CITIES = "worldCities"


ALL_CATEGORIES: tuple[Category, ...] = tuple(Category)

_CATEGORY_VALUES = frozenset(category.value for category in ALL_CATEGORIES)


def parse_category(value: Category | str) -> Category:
    """Coerce a wire key into a Category.

    Raises:
        ValueError: If the key is not a current category.
    """
    if isinstance(value, Category):
        return value
    if value not in _CATEGORY_VALUES:
        msg = f"Unknown category: {value!r}"
        raise ValueError(msg)
    return Category(value)


class Status(str, Enum):
    """Status of a single tracked place."""

    UNVISITED = "unvisited"
    VISITED = "visited"
    BUCKET_LIST = "bucketList"


@dataclass(frozen=True)
class Selection:
    """One tracked place.

    A record with ``deleted`` set is a tombstone: its status is ignored for
    display and statistics, but its id and ``updated_at`` still take part in
    merge resolution.
    """

    id: str
    status: Status
    updated_at: int | None = None
    deleted: bool | None = None
    visited_date: str | None = None
    notes: str | None = None

    @property
    def is_tombstone(self) -> bool:
        return bool(self.deleted)

    @property
    def is_live(self) -> bool:
        return not self.deleted

    @property
    def timestamp(self) -> int:
        """``updated_at`` with a missing value treated as the epoch."""
        return self.updated_at or 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "status": self.status.value}
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        if self.deleted is not None:
            data["deleted"] = self.deleted
        if self.visited_date is not None:
            data["visitedDate"] = self.visited_date
        if self.notes is not None:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Selection:
        """Build a record from its wire form, ignoring unknown keys.

        Raises:
            ValueError: If a required field is missing or has the wrong type.
        """
        if not isinstance(data, Mapping):
            msg = f"Selection must be an object, got {type(data).__name__}"
            raise ValueError(msg)

        item_id = data.get("id")
        if not isinstance(item_id, str) or not item_id:
            msg = "Selection id must be a non-empty string"
            raise ValueError(msg)

        status = Status(data.get("status"))

        updated_at = data.get("updatedAt")
        if updated_at is not None:
            if isinstance(updated_at, bool) or not isinstance(updated_at, int | float):
                msg = f"Selection updatedAt must be a number, got {updated_at!r}"
                raise ValueError(msg)
            if not math.isfinite(updated_at):
                msg = f"Selection updatedAt must be finite, got {updated_at!r}"
                raise ValueError(msg)
            updated_at = int(updated_at)

        deleted = data.get("deleted")
        if deleted is not None and not isinstance(deleted, bool):
            msg = f"Selection deleted flag must be a boolean, got {deleted!r}"
            raise ValueError(msg)

        visited_date = data.get("visitedDate")
        notes = data.get("notes")
        return cls(
            id=item_id,
            status=status,
            updated_at=updated_at,
            deleted=deleted,
            visited_date=visited_date if isinstance(visited_date, str) else None,
            notes=notes if isinstance(notes, str) else None,
        )

    def as_tombstone(self, updated_at: int) -> Selection:
        """Soft-delete this record, keeping the last known status."""
        return replace(self, updated_at=updated_at, deleted=True)


@dataclass(frozen=True)
class Snapshot:
    """Every selection a user owns, grouped by category.

    Snapshots are never mutated; every operation returns a new one. Missing
    categories are filled with empty tuples so that two snapshots holding the
    same records always compare equal.
    """

    categories: Mapping[Category, tuple[Selection, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        provided = {parse_category(key): tuple(value) for key, value in self.categories.items()}
        normalized = {category: provided.get(category, ()) for category in ALL_CATEGORIES}
        object.__setattr__(self, "categories", normalized)

    @classmethod
    def empty(cls) -> Snapshot:
        """The canonical empty snapshot: every category present, no records."""
        return cls({})

    def items(self, category: Category) -> tuple[Selection, ...]:
        return self.categories.get(category, ())

    def find(self, category: Category, item_id: str) -> Selection | None:
        for selection in self.items(category):
            if selection.id == item_id:
                return selection
        return None

    def with_items(self, category: Category, items: Iterable[Selection]) -> Snapshot:
        updated = dict(self.categories)
        updated[category] = tuple(items)
        return Snapshot(updated)

    def with_selection(self, category: Category, selection: Selection) -> Snapshot:
        """Insert or replace (by id, in place) a single record."""
        current = list(self.items(category))
        for index, existing in enumerate(current):
            if existing.id == selection.id:
                current[index] = selection
                break
        else:
            current.append(selection)
        return self.with_items(category, current)

    def is_empty(self) -> bool:
        return not any(self.categories.values())

    def count(self) -> int:
        return sum(len(items) for items in self.categories.values())

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            category.value: [selection.to_dict() for selection in items]
            for category, items in self.categories.items()
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> Snapshot:
        """Parse the wire form of a snapshot leniently.

        Unknown category keys and malformed records are dropped with a
        warning. Duplicate ids within a category collapse to the record with
        the newest ``updatedAt`` (the first one wins a tie).
        """
        if not raw:
            return cls.empty()

        categories: dict[Category, tuple[Selection, ...]] = {}
        for key, items in raw.items():
            try:
                category = parse_category(key)
            except ValueError:
                logger.warning("snapshot_unknown_category_dropped", extra={"category": key})
                continue
            if not isinstance(items, list | tuple):
                logger.warning(
                    "snapshot_category_not_a_list",
                    extra={"category": key, "type": type(items).__name__},
                )
                continue
            categories[category] = _parse_items(category, items)
        return cls(categories)


def _parse_items(category: Category, items: Iterable[Any]) -> tuple[Selection, ...]:
    by_id: dict[str, Selection] = {}
    for item in items:
        if isinstance(item, Selection):
            selection = item
        else:
            try:
                selection = Selection.from_dict(item)
            except ValueError as exc:
                logger.warning(
                    "snapshot_malformed_item_skipped",
                    extra={"category": category.value, "error": str(exc)},
                )
                continue
        existing = by_id.get(selection.id)
        if existing is None or selection.timestamp > existing.timestamp:
            by_id[selection.id] = selection
    return tuple(by_id.values())
