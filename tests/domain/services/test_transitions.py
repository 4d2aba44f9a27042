"""Tests for the status transition machine."""

import pytest

from travelsync.domain.exceptions.domain_exceptions import InvalidTransitionError
from travelsync.domain.models.selection import Category, Selection, Snapshot, Status
from travelsync.domain.services.propagation import RelationshipPropagator
from travelsync.domain.services.reference import ReferenceData
from travelsync.domain.services.transitions import (
    SetStatus,
    Toggle,
    apply_transition,
    current_status,
    next_stamp,
)

PARKS = Category.NATIONAL_PARKS


def _toggle(snapshot: Snapshot, now: int) -> Snapshot:
    return apply_transition(snapshot, PARKS, "yellowstone", Toggle(), now=now)


class TestToggle:
    """Test suite for the toggle cycle."""

    def test_three_toggles_cycle_to_tombstone(self):
        first = _toggle(Snapshot.empty(), 100)
        second = _toggle(first, 200)
        third = _toggle(second, 300)

        assert first.find(PARKS, "yellowstone") == Selection(
            "yellowstone", Status.VISITED, updated_at=100, deleted=False
        )
        assert second.find(PARKS, "yellowstone").status == Status.BUCKET_LIST
        assert third.find(PARKS, "yellowstone").deleted is True
        assert current_status(third, PARKS, "yellowstone") == Status.UNVISITED

    def test_fourth_toggle_revives_with_new_timestamp(self):
        snapshot = Snapshot.empty()
        for now in (100, 200, 300):
            snapshot = _toggle(snapshot, now)

        revived = _toggle(snapshot, 400)

        record = revived.find(PARKS, "yellowstone")
        assert record == Selection("yellowstone", Status.VISITED, updated_at=400, deleted=False)
        assert len(revived.items(PARKS)) == 1

    def test_toggle_keeps_date_and_notes(self):
        snapshot = Snapshot(
            {PARKS: (Selection("zion", Status.VISITED, 10, False, "2022-06-01", "hot"),)}
        )

        result = apply_transition(snapshot, PARKS, "zion", Toggle(), now=20)

        record = result.find(PARKS, "zion")
        assert record.status == Status.BUCKET_LIST
        assert record.visited_date == "2022-06-01"
        assert record.notes == "hot"

    def test_stamp_is_strictly_newer_than_existing(self):
        snapshot = Snapshot({PARKS: (Selection("zion", Status.VISITED, updated_at=500),)})

        result = apply_transition(snapshot, PARKS, "zion", Toggle(), now=100)

        assert result.find(PARKS, "zion").updated_at == 501

    def test_next_stamp(self):
        assert next_stamp(100, None) == 100
        assert next_stamp(100, Selection("a", Status.VISITED, updated_at=50)) == 100
        assert next_stamp(100, Selection("a", Status.VISITED, updated_at=100)) == 101
        assert next_stamp(100, Selection("a", Status.VISITED)) == 100

    def test_empty_id_is_rejected(self):
        with pytest.raises(InvalidTransitionError):
            apply_transition(Snapshot.empty(), PARKS, "", Toggle(), now=1)

    def test_unknown_action_is_rejected(self):
        with pytest.raises(InvalidTransitionError, match="Unsupported transition action"):
            apply_transition(Snapshot.empty(), PARKS, "zion", "toggle", now=1)  # type: ignore[arg-type]


class TestSetStatus:
    """Test suite for SetStatus."""

    def test_set_status_with_annotations(self):
        result = apply_transition(
            Snapshot.empty(),
            PARKS,
            "zion",
            SetStatus(Status.VISITED, visited_date="2021-04-02", notes="Angels Landing"),
            now=10,
        )

        assert result.find(PARKS, "zion") == Selection(
            "zion", Status.VISITED, 10, False, "2021-04-02", "Angels Landing"
        )

    def test_set_status_preserves_annotations_not_given(self):
        snapshot = Snapshot({PARKS: (Selection("zion", Status.VISITED, 10, False, "2021-04-02", "x"),)})

        result = apply_transition(snapshot, PARKS, "zion", SetStatus(Status.BUCKET_LIST), now=20)

        record = result.find(PARKS, "zion")
        assert record.visited_date == "2021-04-02"
        assert record.notes == "x"

    @pytest.mark.parametrize("status", [None, Status.UNVISITED])
    def test_removal_writes_tombstone_keeping_last_status(self, status):
        snapshot = Snapshot({PARKS: (Selection("zion", Status.BUCKET_LIST, 10, False),)})

        result = apply_transition(snapshot, PARKS, "zion", SetStatus(status), now=20)

        assert result.find(PARKS, "zion") == Selection("zion", Status.BUCKET_LIST, 20, True)

    def test_removing_unknown_item_is_a_no_op(self):
        snapshot = Snapshot.empty()

        assert apply_transition(snapshot, PARKS, "zion", SetStatus(None), now=20) is snapshot

    def test_visited_transition_propagates_with_same_stamp(self):
        propagator = RelationshipPropagator(
            ReferenceData.build(us_cities=[{"id": "austin-tx", "stateCode": "TX"}])
        )

        result = apply_transition(
            Snapshot.empty(),
            Category.US_CITIES,
            "austin-tx",
            SetStatus(Status.VISITED),
            now=42,
            propagator=propagator,
        )

        assert result.find(Category.STATES, "TX") == Selection("TX", Status.VISITED, 42, False)
