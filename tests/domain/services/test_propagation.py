"""Tests for city -> state/country propagation."""

import pytest

from travelsync.domain.models.selection import Category, Selection, Snapshot, Status
from travelsync.domain.services.propagation import RelationshipPropagator
from travelsync.domain.services.reference import ReferenceData

NOW = 1_700_000_000_000


@pytest.fixture
def propagator(sample_reference: ReferenceData) -> RelationshipPropagator:
    return RelationshipPropagator(sample_reference)


def _visited(category: Category, item_id: str) -> Snapshot:
    return Snapshot({category: (Selection(item_id, Status.VISITED, NOW, deleted=False),)})


class TestRelationshipPropagator:
    """Test suite for RelationshipPropagator."""

    def test_world_city_marks_country_visited(self, propagator):
        snapshot = _visited(Category.WORLD_CITIES, "paris-fr")

        result = propagator.propagate(snapshot, Category.WORLD_CITIES, "paris-fr", NOW)

        assert result.to_dict()["countries"] == [
            {"id": "FR", "status": "visited", "updatedAt": NOW, "deleted": False}
        ]

    def test_us_city_marks_state_visited(self, propagator):
        snapshot = _visited(Category.US_CITIES, "austin-tx")

        result = propagator.propagate(snapshot, Category.US_CITIES, "austin-tx", NOW)

        assert result.find(Category.STATES, "TX") == Selection("TX", Status.VISITED, NOW, deleted=False)

    def test_world_city_in_us_state_marks_country_and_state(self, propagator):
        snapshot = _visited(Category.WORLD_CITIES, "denver-us")

        result = propagator.propagate(snapshot, Category.WORLD_CITIES, "denver-us", NOW)

        assert result.find(Category.COUNTRIES, "US").status == Status.VISITED
        assert result.find(Category.STATES, "CO").status == Status.VISITED

    def test_country_outside_catalog_is_not_marked(self, propagator):
        snapshot = _visited(Category.WORLD_CITIES, "atlantis-xx")

        result = propagator.propagate(snapshot, Category.WORLD_CITIES, "atlantis-xx", NOW)

        assert result == snapshot

    def test_bucket_list_parent_is_never_downgraded(self, propagator):
        parent = Selection("FR", Status.BUCKET_LIST, updated_at=5, deleted=False)
        snapshot = _visited(Category.WORLD_CITIES, "paris-fr").with_selection(Category.COUNTRIES, parent)

        result = propagator.propagate(snapshot, Category.WORLD_CITIES, "paris-fr", NOW)

        assert result.find(Category.COUNTRIES, "FR") is parent
        assert result.find(Category.COUNTRIES, "FR").to_dict() == parent.to_dict()

    def test_visited_parent_keeps_its_original_timestamp(self, propagator):
        parent = Selection("FR", Status.VISITED, updated_at=5, deleted=False, visited_date="2019-01-01")
        snapshot = _visited(Category.WORLD_CITIES, "paris-fr").with_selection(Category.COUNTRIES, parent)

        result = propagator.propagate(snapshot, Category.WORLD_CITIES, "paris-fr", NOW)

        assert result.find(Category.COUNTRIES, "FR") is parent

    def test_live_unvisited_parent_is_left_alone(self, propagator):
        parent = Selection("FR", Status.UNVISITED, updated_at=5, deleted=False)
        snapshot = _visited(Category.WORLD_CITIES, "paris-fr").with_selection(Category.COUNTRIES, parent)

        result = propagator.propagate(snapshot, Category.WORLD_CITIES, "paris-fr", NOW)

        assert result.find(Category.COUNTRIES, "FR") is parent
        assert result.find(Category.COUNTRIES, "FR").timestamp == 5

    def test_tombstoned_parent_is_revived(self, propagator):
        parent = Selection("FR", Status.BUCKET_LIST, updated_at=5, deleted=True)
        snapshot = _visited(Category.WORLD_CITIES, "paris-fr").with_selection(Category.COUNTRIES, parent)

        result = propagator.propagate(snapshot, Category.WORLD_CITIES, "paris-fr", NOW)

        assert result.find(Category.COUNTRIES, "FR") == Selection("FR", Status.VISITED, NOW, deleted=False)
        assert len(result.items(Category.COUNTRIES)) == 1

    def test_bucket_list_child_does_not_propagate(self, propagator):
        snapshot = Snapshot(
            {Category.WORLD_CITIES: (Selection("paris-fr", Status.BUCKET_LIST, NOW, deleted=False),)}
        )

        assert propagator.propagate(snapshot, Category.WORLD_CITIES, "paris-fr", NOW) == snapshot

    def test_other_categories_have_no_parents(self, propagator):
        assert propagator.parents_of(Category.NATIONAL_PARKS, "yellowstone") == []

    def test_unknown_city_has_no_parents(self, propagator):
        assert propagator.parents_of(Category.US_CITIES, "nowhere") == []
