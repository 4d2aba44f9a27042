"""Static place reference data used by the selection core.

The lookup tables are built once per process from the place datasets and
passed explicitly to whatever needs them; nothing here is recomputed per call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from travelsync.domain.exceptions.domain_exceptions import ReferenceDataError
from travelsync.domain.models.selection import Category, parse_category
from travelsync.domain.services.schema import LEGACY_MOUNTAINS, LEGACY_STADIUMS

logger = logging.getLogger(__name__)


class _Place(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(min_length=1)


class CountryPlace(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    code: str = Field(min_length=1)


class UsCityPlace(_Place):
    state_code: str = Field(alias="stateCode", min_length=1)


class WorldCityPlace(_Place):
    country_code: str = Field(alias="countryCode", min_length=1)
    state_code: str | None = Field(default=None, alias="stateCode")


class StadiumPlace(_Place):
    sport: str


class MountainPlace(_Place):
    elevation: float
    country_code: str | None = Field(default=None, alias="countryCode")


class ReferenceDocument(BaseModel):
    """On-disk layout of the reference data file."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    countries: list[CountryPlace] = Field(default_factory=list)
    us_cities: list[UsCityPlace] = Field(default_factory=list, alias="usCities")
    world_cities: list[WorldCityPlace] = Field(default_factory=list, alias="worldCities")
    stadiums: list[StadiumPlace] = Field(default_factory=list)
    mountains: list[MountainPlace] = Field(default_factory=list)
    category_totals: dict[str, int] = Field(default_factory=dict, alias="categoryTotals")

    @field_validator("category_totals")
    @classmethod
    def _validate_totals(cls, value: dict[str, int]) -> dict[str, int]:
        for key, total in value.items():
            parse_category(key)
            if total < 0:
                msg = f"Category total for {key} must not be negative"
                raise ValueError(msg)
        return value


def _frozen(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class ReferenceData:
    """Immutable id -> parent lookups, legacy catalog and per-category totals."""

    us_city_states: Mapping[str, str] = field(default_factory=lambda: _frozen({}))
    world_city_countries: Mapping[str, str] = field(default_factory=lambda: _frozen({}))
    world_city_states: Mapping[str, str] = field(default_factory=lambda: _frozen({}))
    country_codes: frozenset[str] = frozenset()
    legacy_catalog: Mapping[str, Mapping[str, Mapping[str, Any]]] = field(
        default_factory=lambda: _frozen({})
    )
    category_totals: Mapping[Category, int] = field(default_factory=lambda: _frozen({}))

    @classmethod
    def empty(cls) -> ReferenceData:
        return cls()

    @classmethod
    def from_document(cls, document: ReferenceDocument) -> ReferenceData:
        legacy_catalog = {
            LEGACY_STADIUMS: _frozen(
                {place.id: _frozen({"sport": place.sport}) for place in document.stadiums}
            ),
            LEGACY_MOUNTAINS: _frozen(
                {
                    place.id: _frozen(
                        {"elevation": place.elevation, "countryCode": place.country_code}
                    )
                    for place in document.mountains
                }
            ),
        }
        return cls(
            us_city_states=_frozen({city.id: city.state_code for city in document.us_cities}),
            world_city_countries=_frozen(
                {city.id: city.country_code for city in document.world_cities}
            ),
            world_city_states=_frozen(
                {city.id: city.state_code for city in document.world_cities if city.state_code}
            ),
            country_codes=frozenset(country.code for country in document.countries),
            legacy_catalog=_frozen(legacy_catalog),
            category_totals=_frozen(
                {parse_category(key): total for key, total in document.category_totals.items()}
            ),
        )

    @classmethod
    def build(
        cls,
        *,
        countries: Iterable[Mapping[str, Any]] = (),
        us_cities: Iterable[Mapping[str, Any]] = (),
        world_cities: Iterable[Mapping[str, Any]] = (),
        stadiums: Iterable[Mapping[str, Any]] = (),
        mountains: Iterable[Mapping[str, Any]] = (),
        category_totals: Mapping[str, int] | None = None,
    ) -> ReferenceData:
        """Validate raw place lists and build the lookup tables.

        Raises:
            ReferenceDataError: If any place record is invalid.
        """
        try:
            document = ReferenceDocument.model_validate(
                {
                    "countries": list(countries),
                    "usCities": list(us_cities),
                    "worldCities": list(world_cities),
                    "stadiums": list(stadiums),
                    "mountains": list(mountains),
                    "categoryTotals": dict(category_totals or {}),
                }
            )
        except ValidationError as exc:
            msg = f"Invalid reference data: {exc}"
            raise ReferenceDataError(msg) from exc
        return cls.from_document(document)

    def legacy_attributes(self, legacy_key: str, item_id: str) -> Mapping[str, Any] | None:
        return self.legacy_catalog.get(legacy_key, {}).get(item_id)

    def total_for(self, category: Category) -> int:
        return self.category_totals.get(category, 0)


def load_reference_data(path: str | Path) -> ReferenceData:
    """Load and validate the reference data file.

    Raises:
        ReferenceDataError: If the file is missing or does not validate.
    """
    file_path = Path(path)
    try:
        raw = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read reference data at {file_path}"
        raise ReferenceDataError(msg, details={"path": str(file_path)}) from exc

    try:
        document = ReferenceDocument.model_validate_json(raw)
    except ValidationError as exc:
        msg = f"Invalid reference data in {file_path}: {exc.error_count()} error(s)"
        raise ReferenceDataError(msg, details={"path": str(file_path)}) from exc

    reference = ReferenceData.from_document(document)
    logger.info(
        "reference_data_loaded",
        extra={
            "path": str(file_path),
            "us_cities": len(reference.us_city_states),
            "world_cities": len(reference.world_city_countries),
            "countries": len(reference.country_codes),
        },
    )
    return reference
