"""Refresh state persisted as key/value metadata."""

from datetime import datetime
from enum import Enum
from typing import Dict, Mapping, Optional

import pendulum
from pydantic import BaseModel, Field

LAST_REFRESH = "last_refresh"
LAST_REFRESH_STATUS = "last_refresh_status"
LAST_REFRESH_ADDED = "last_refresh_added"
LAST_REFRESH_TOTAL = "last_refresh_total"
LAST_REFRESH_ERROR_COUNT = "last_refresh_error_count"
LAST_CRON_REFRESH = "last_cron_refresh"

REFRESH_STATE_KEYS = (
    LAST_REFRESH,
    LAST_REFRESH_STATUS,
    LAST_REFRESH_ADDED,
    LAST_REFRESH_TOTAL,
    LAST_REFRESH_ERROR_COUNT,
)


class RefreshStatus(str, Enum):
    """Outcome of a completed refresh cycle."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def derive(cls, added: int, error_count: int) -> "RefreshStatus":
        """Zero errors is success; errors with additions is a warning."""
        if error_count == 0:
            return cls.SUCCESS
        if added > 0:
            return cls.WARNING
        return cls.ERROR


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO timestamp, treating naive values as UTC."""
    if not value:
        return None
    try:
        return pendulum.parse(value, tz="UTC")
    except ValueError:
        return None


def _parse_int(value: Optional[str]) -> int:
    try:
        return int(value) if value is not None else 0
    except ValueError:
        return 0


class RefreshState(BaseModel):
    """Process-wide outcome of the last completed refresh."""

    last_refresh: Optional[datetime] = Field(None, description="When the last cycle completed")
    status: Optional[RefreshStatus] = Field(None, description="Status of the last cycle")
    added: int = Field(0, description="Articles added by the last cycle")
    total: int = Field(0, description="Items processed by the last cycle")
    error_count: int = Field(0, description="Sources that failed in the last cycle")

    @classmethod
    def from_metadata(cls, values: Mapping[str, Optional[str]]) -> "RefreshState":
        """Build from raw metadata values."""
        status = values.get(LAST_REFRESH_STATUS)
        try:
            parsed_status = RefreshStatus(status) if status else None
        except ValueError:
            parsed_status = None
        return cls(
            last_refresh=parse_timestamp(values.get(LAST_REFRESH)),
            status=parsed_status,
            added=_parse_int(values.get(LAST_REFRESH_ADDED)),
            total=_parse_int(values.get(LAST_REFRESH_TOTAL)),
            error_count=_parse_int(values.get(LAST_REFRESH_ERROR_COUNT)),
        )

    def to_metadata(self) -> Dict[str, str]:
        """Serialize to metadata key/value strings."""
        if self.last_refresh is None or self.status is None:
            raise ValueError("Cannot persist a refresh state without timestamp and status")
        return {
            LAST_REFRESH: pendulum.instance(self.last_refresh).in_timezone("UTC").to_iso8601_string(),
            LAST_REFRESH_STATUS: self.status.value,
            LAST_REFRESH_ADDED: str(self.added),
            LAST_REFRESH_TOTAL: str(self.total),
            LAST_REFRESH_ERROR_COUNT: str(self.error_count),
        }
