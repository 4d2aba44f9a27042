"""Pytest configuration and shared fixtures.

This module provides common fixtures for all tests.
"""

import logging

import pytest

from travelsync.domain.services.reference import ReferenceData


@pytest.fixture(autouse=True)
def _quiet_root_logger():
    """Keep CLI runs from leaving handlers installed on the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def sample_reference() -> ReferenceData:
    """Small place catalog covering every propagation path."""
    return ReferenceData.build(
        countries=[{"code": "FR"}, {"code": "US"}],
        us_cities=[{"id": "austin-tx", "stateCode": "TX"}],
        world_cities=[
            {"id": "paris-fr", "countryCode": "FR"},
            {"id": "denver-us", "countryCode": "US", "stateCode": "CO"},
            {"id": "atlantis-xx", "countryCode": "XX"},
        ],
        stadiums=[{"id": "fenway", "sport": "Baseball"}],
        mountains=[{"id": "whitney", "elevation": 4421, "countryCode": "US"}],
        category_totals={"countries": 197, "states": 50, "worldCities": 4},
    )
