from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReferenceConfig(BaseModel):
    """Location of the static place reference data (city parents, legacy catalog, totals)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    data_path: str | None = Field(default=None, validation_alias="REFERENCE_DATA_PATH")

    @field_validator("data_path", mode="before")
    @classmethod
    def _validate_path(cls, value: Any) -> str | None:
        if value is None:
            return None
        trimmed = str(value).strip()
        if not trimmed:
            return None
        if "\x00" in trimmed:
            msg = "Reference data path contains invalid characters"
            raise ValueError(msg)
        return trimmed
