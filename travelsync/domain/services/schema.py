"""Reclassification rules for legacy aggregate categories.

Older releases stored several of today's categories in one bucket. Each
legacy bucket has a classifier that maps one item's classification key to
the set of current categories it belongs to (possibly empty, possibly more
than one).
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from travelsync.domain.exceptions.domain_exceptions import ClassificationError
from travelsync.domain.models.selection import Category

LEGACY_STADIUMS = "stadiums"
LEGACY_MOUNTAINS = "mountains"

SPORT_CATEGORIES: Mapping[str, Category] = MappingProxyType(
    {
        "Baseball": Category.MLB_STADIUMS,
        "American Football": Category.NFL_STADIUMS,
        "Basketball": Category.NBA_STADIUMS,
        "Hockey": Category.NHL_STADIUMS,
        "Football": Category.SOCCER_STADIUMS,
    }
)

FIVE_K_PEAK_MIN_ELEVATION_M = 5000
FOURTEENER_MIN_ELEVATION_M = 4267  # 14,000 ft
FOURTEENER_COUNTRY = "US"

Classifier = Callable[[Mapping[str, Any]], frozenset[Category]]


def classify_stadium(attributes: Mapping[str, Any]) -> frozenset[Category]:
    """Route a legacy stadium by sport. Sports without a category map nowhere."""
    sport = attributes.get("sport")
    if not isinstance(sport, str) or not sport.strip():
        msg = "Stadium has no sport tag"
        raise ClassificationError(msg, details={"sport": sport})
    target = SPORT_CATEGORIES.get(sport.strip())
    return frozenset({target}) if target else frozenset()


def classify_mountain(attributes: Mapping[str, Any]) -> frozenset[Category]:
    """Route a legacy mountain by elevation and country.

    A US peak above 5000 m lands in both peak lists.
    """
    raw_elevation = attributes.get("elevation")
    if isinstance(raw_elevation, bool) or raw_elevation is None:
        msg = "Mountain has no elevation"
        raise ClassificationError(msg, details={"elevation": raw_elevation})
    try:
        elevation = float(raw_elevation)
    except (TypeError, ValueError) as exc:
        msg = f"Unparseable elevation: {raw_elevation!r}"
        raise ClassificationError(msg, details={"elevation": raw_elevation}) from exc
    if math.isnan(elevation):
        msg = "Elevation is NaN"
        raise ClassificationError(msg, details={"elevation": raw_elevation})

    country = attributes.get("countryCode")
    country_code = country.strip().upper() if isinstance(country, str) else None

    targets: set[Category] = set()
    if elevation >= FIVE_K_PEAK_MIN_ELEVATION_M:
        targets.add(Category.FIVE_K_PEAKS)
    if elevation >= FOURTEENER_MIN_ELEVATION_M and country_code == FOURTEENER_COUNTRY:
        targets.add(Category.FOURTEENERS)
    return frozenset(targets)


@dataclass(frozen=True)
class LegacyCategory:
    """An obsolete aggregate bucket and the rule that splits it."""

    key: str
    key_attributes: tuple[str, ...]
    classify: Classifier


LEGACY_CATEGORIES: Mapping[str, LegacyCategory] = MappingProxyType(
    {
        LEGACY_STADIUMS: LegacyCategory(
            key=LEGACY_STADIUMS,
            key_attributes=("sport",),
            classify=classify_stadium,
        ),
        LEGACY_MOUNTAINS: LegacyCategory(
            key=LEGACY_MOUNTAINS,
            key_attributes=("elevation", "countryCode"),
            classify=classify_mountain,
        ),
    }
)


def is_legacy_category(key: str) -> bool:
    return key in LEGACY_CATEGORIES
