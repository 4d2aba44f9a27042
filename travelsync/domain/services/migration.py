"""Upgrade persisted snapshots whose category layout is obsolete.

Each legacy aggregate bucket is fanned out into the current categories its
items classify into, then removed. Running the pipeline on its own output is
a no-op because the legacy keys are gone after the first pass.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from travelsync.domain.exceptions.domain_exceptions import ClassificationError
from travelsync.domain.models.selection import Selection, Snapshot
from travelsync.domain.services.reference import ReferenceData
from travelsync.domain.services.schema import LEGACY_CATEGORIES, LegacyCategory

logger = logging.getLogger(__name__)

RawSnapshot = Mapping[str, Any]


def needs_migration(raw: RawSnapshot | Snapshot | None) -> bool:
    """Whether any legacy aggregate key is present."""
    if raw is None or isinstance(raw, Snapshot):
        return False
    return any(key in raw for key in LEGACY_CATEGORIES)


def migrate(
    raw: RawSnapshot | Snapshot | None, *, reference: ReferenceData | None = None
) -> Snapshot:
    """Return ``raw`` expressed in the current category schema.

    Args:
        raw: Parsed JSON snapshot, possibly holding legacy buckets, or a Snapshot.
        reference: Place catalog used when a legacy item carries no
            classification attributes of its own.

    Returns:
        A snapshot that uses only current categories.
    """
    if raw is None:
        return Snapshot.empty()
    if isinstance(raw, Snapshot):
        return raw

    working: dict[str, list[Any]] = {
        key: list(value) if isinstance(value, list | tuple) else value
        for key, value in raw.items()
        if key not in LEGACY_CATEGORIES
    }

    for key, legacy in LEGACY_CATEGORIES.items():
        if key not in raw:
            continue
        items = raw[key]
        if not isinstance(items, list | tuple):
            logger.warning(
                "legacy_category_not_a_list",
                extra={"legacy_category": key, "type": type(items).__name__},
            )
            continue
        moved = _fan_out(legacy, items, working, reference)
        logger.info(
            "legacy_category_migrated",
            extra={"legacy_category": key, "items": len(items), "moved": moved},
        )

    return Snapshot.from_dict(working)


def _fan_out(
    legacy: LegacyCategory,
    items: list[Any] | tuple[Any, ...],
    working: dict[str, Any],
    reference: ReferenceData | None,
) -> int:
    moved = 0
    for item in items:
        try:
            selection = Selection.from_dict(item)
            targets = legacy.classify(_classification_attributes(legacy, item, reference))
        except (ClassificationError, ValueError) as exc:
            logger.warning(
                "legacy_item_skipped",
                extra={
                    "legacy_category": legacy.key,
                    "item_id": item.get("id") if isinstance(item, Mapping) else None,
                    "error": str(exc),
                },
            )
            continue

        if not targets:
            logger.debug(
                "legacy_item_unmapped",
                extra={"legacy_category": legacy.key, "item_id": selection.id},
            )
            continue

        for target in targets:
            bucket = working.get(target.value)
            if not isinstance(bucket, list):
                bucket = []
                working[target.value] = bucket
            if any(_item_id(existing) == selection.id for existing in bucket):
                continue
            bucket.append(selection.to_dict())
            moved += 1
    return moved


def _classification_attributes(
    legacy: LegacyCategory, item: Mapping[str, Any], reference: ReferenceData | None
) -> Mapping[str, Any]:
    """The item's own key attributes layered over the place catalog entry."""
    own = {name: item[name] for name in legacy.key_attributes if item.get(name) is not None}
    if reference is None:
        return own
    catalog_entry = reference.legacy_attributes(legacy.key, item["id"]) or {}
    return {**catalog_entry, **own}


def _item_id(item: Any) -> Any:
    if isinstance(item, Selection):
        return item.id
    if isinstance(item, Mapping):
        return item.get("id")
    return None
