from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RuntimeConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    db_path: str = Field(default="/data/travelsync.db", validation_alias="DB_PATH")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    use_loguru: bool = Field(default=True, validation_alias="LOG_USE_LOGURU")
    local_store_key: str = Field(
        default="travelmap_selections", validation_alias="LOCAL_STORE_KEY"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Any) -> str:
        log_level = str(value or "INFO").upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if log_level not in valid_levels:
            msg = f"Invalid log level: {value}. Must be one of {valid_levels}"
            raise ValueError(msg)
        return log_level

    @field_validator("log_file", mode="before")
    @classmethod
    def _validate_log_file(cls, value: Any) -> str | None:
        if value is None:
            return None
        trimmed = str(value).strip()
        return trimmed or None

    @field_validator("local_store_key", mode="before")
    @classmethod
    def _validate_store_key(cls, value: Any) -> str:
        key = str(value or "travelmap_selections").strip()
        if not key:
            msg = "Local store key cannot be empty"
            raise ValueError(msg)
        if len(key) > 200:
            msg = "Local store key is too long"
            raise ValueError(msg)
        if any(ch.isspace() for ch in key):
            msg = "Local store key cannot contain whitespace"
            raise ValueError(msg)
        return key
