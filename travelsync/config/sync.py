from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from travelsync.core.time_utils import DAY_MS


class SyncConfig(BaseModel):
    """Remote snapshot store and merge configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tombstone_retention_days: int = Field(
        default=365, validation_alias="SYNC_TOMBSTONE_RETENTION_DAYS"
    )
    remote_url: str = Field(default="", validation_alias="SYNC_REMOTE_URL")
    remote_api_key: str = Field(default="", validation_alias="SYNC_REMOTE_API_KEY")
    remote_timeout_sec: float = Field(default=15.0, validation_alias="SYNC_REMOTE_TIMEOUT_SEC")
    remote_max_retries: int = Field(default=2, validation_alias="SYNC_REMOTE_MAX_RETRIES")

    @property
    def tombstone_retention_ms(self) -> int:
        return self.tombstone_retention_days * DAY_MS

    @property
    def remote_enabled(self) -> bool:
        return bool(self.remote_url)

    @field_validator("tombstone_retention_days", mode="before")
    @classmethod
    def _validate_retention(cls, value: Any) -> int:
        try:
            parsed = int(str(value if value not in (None, "") else 365))
        except ValueError as exc:
            msg = "Tombstone retention days must be a valid integer"
            raise ValueError(msg) from exc
        if parsed < 1 or parsed > 3650:
            msg = "Tombstone retention days must be between 1 and 3650"
            raise ValueError(msg)
        return parsed

    @field_validator("remote_url", mode="before")
    @classmethod
    def _validate_remote_url(cls, value: Any) -> str:
        url = str(value or "").strip()
        if not url:
            return ""
        if not url.startswith(("http://", "https://")):
            msg = "Sync remote URL must start with http:// or https://"
            raise ValueError(msg)
        return url.rstrip("/")

    @field_validator("remote_api_key", mode="before")
    @classmethod
    def _validate_api_key(cls, value: Any) -> str:
        key = str(value or "").strip()
        if len(key) > 500:
            msg = "Sync remote API key appears to be too long"
            raise ValueError(msg)
        if any(char in key for char in (" ", "\n", "\t")):
            msg = "Sync remote API key contains invalid characters"
            raise ValueError(msg)
        return key

    @field_validator("remote_timeout_sec", mode="before")
    @classmethod
    def _validate_timeout(cls, value: Any) -> float:
        try:
            parsed = float(str(value if value not in (None, "") else 15.0))
        except ValueError as exc:
            msg = "Sync remote timeout must be a valid number"
            raise ValueError(msg) from exc
        if parsed <= 0 or parsed > 300:
            msg = "Sync remote timeout must be between 0 and 300 seconds"
            raise ValueError(msg)
        return parsed

    @field_validator("remote_max_retries", mode="before")
    @classmethod
    def _validate_retries(cls, value: Any, info: ValidationInfo) -> int:
        default = cls.model_fields[info.field_name].default
        try:
            parsed = int(str(value if value not in (None, "") else default))
        except ValueError as exc:
            msg = f"{info.field_name.replace('_', ' ')} must be a valid integer"
            raise ValueError(msg) from exc
        if parsed < 0 or parsed > 10:
            msg = f"{info.field_name.replace('_', ' ').capitalize()} must be between 0 and 10"
            raise ValueError(msg)
        return parsed
