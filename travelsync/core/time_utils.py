from __future__ import annotations

from datetime import UTC, datetime

DAY_MS = 24 * 60 * 60 * 1000


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def now_ms() -> int:
    """Current wall-clock time as integer epoch milliseconds."""
    return int(utc_now().timestamp() * 1000)


__all__ = ["DAY_MS", "UTC", "now_ms", "utc_now"]
