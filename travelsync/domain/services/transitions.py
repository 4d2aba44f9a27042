"""Status transitions for a single tracked place.

The toggle cycles ``unvisited -> visited -> bucketList -> unvisited``; the
final step writes a tombstone instead of deleting the record. ``SetStatus``
jumps straight to any state and is used by the date/notes editing flow.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from travelsync.domain.exceptions.domain_exceptions import InvalidTransitionError
from travelsync.domain.models.selection import Category, Selection, Snapshot, Status
from travelsync.domain.services.propagation import RelationshipPropagator

logger = logging.getLogger(__name__)

_CYCLE: dict[Status, Status | None] = {
    Status.UNVISITED: Status.VISITED,
    Status.VISITED: Status.BUCKET_LIST,
    Status.BUCKET_LIST: None,
}


@dataclass(frozen=True)
class Toggle:
    """Advance one step around the status cycle."""


@dataclass(frozen=True)
class SetStatus:
    """Jump to ``status``; ``None`` (or ``unvisited``) removes the mark.

    ``visited_date`` and ``notes`` overwrite the stored values only when given.
    """

    status: Status | None
    visited_date: str | None = None
    notes: str | None = None


TransitionAction = Toggle | SetStatus


def current_status(snapshot: Snapshot, category: Category, item_id: str) -> Status:
    """Displayed status: absent and tombstoned records both read as unvisited."""
    selection = snapshot.find(category, item_id)
    if selection is None or selection.is_tombstone:
        return Status.UNVISITED
    return selection.status


def next_status(current: Status) -> Status | None:
    return _CYCLE[current]


def next_stamp(now: int, existing: Selection | None) -> int:
    """A timestamp strictly newer than the record being replaced."""
    if existing is not None and existing.updated_at is not None and existing.updated_at >= now:
        return existing.updated_at + 1
    return now


def apply_transition(
    snapshot: Snapshot,
    category: Category,
    item_id: str,
    action: TransitionAction,
    *,
    now: int,
    propagator: RelationshipPropagator | None = None,
) -> Snapshot:
    """Apply a user action to one place and return the new snapshot.

    A transition to ``visited`` also runs relationship propagation, stamped
    with the same timestamp as the triggering record.

    Raises:
        InvalidTransitionError: If the id is empty or the action is unknown.
    """
    if not item_id:
        msg = "Cannot change the status of an item without an id"
        raise InvalidTransitionError(msg, details={"category": category.value})

    existing = snapshot.find(category, item_id)

    if isinstance(action, Toggle):
        target = next_status(current_status(snapshot, category, item_id))
        visited_date = existing.visited_date if existing else None
        notes = existing.notes if existing else None
    elif isinstance(action, SetStatus):
        target = None if action.status in (None, Status.UNVISITED) else action.status
        visited_date = action.visited_date
        notes = action.notes
        if existing is not None:
            visited_date = visited_date if visited_date is not None else existing.visited_date
            notes = notes if notes is not None else existing.notes
    else:
        msg = f"Unsupported transition action: {type(action).__name__}"
        raise InvalidTransitionError(msg, details={"category": category.value, "id": item_id})

    stamp = next_stamp(now, existing)

    if target is None:
        if existing is None:
            return snapshot
        logger.debug(
            "selection_removed", extra={"category": category.value, "item_id": item_id}
        )
        return snapshot.with_selection(category, existing.as_tombstone(stamp))

    record = Selection(
        id=item_id,
        status=target,
        updated_at=stamp,
        deleted=False,
        visited_date=visited_date,
        notes=notes,
    )
    result = snapshot.with_selection(category, record)

    if target == Status.VISITED and propagator is not None:
        result = propagator.propagate(result, category, item_id, stamp)
    return result
