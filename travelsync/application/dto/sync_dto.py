"""Data Transfer Objects for synchronization results."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from travelsync.domain.models.selection import Snapshot


class SyncStatus(str, Enum):
    """Coarse sync state a UI can poll."""

    IDLE = "idle"
    SYNCING = "syncing"
    ERROR = "error"


@dataclass(frozen=True)
class SyncOutcome:
    """Result of one sync cycle.

    On failure ``snapshot`` is the local snapshot the cycle started from.
    """

    success: bool
    snapshot: Snapshot
    error: str | None = None
    uploaded: bool = False

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "success": self.success,
            "uploaded": self.uploaded,
            "count": self.snapshot.count(),
        }
        if self.error is not None:
            result["error"] = self.error
        return result
