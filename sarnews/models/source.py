"""Source model for the feed registry."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import DBModel


class Source(DBModel):
    """Configured RSS feed source and its fetch health."""

    name: str = Field(..., description="Display name")
    url: str = Field(..., description="RSS feed URL (unique)")
    is_active: bool = Field(True, description="Whether the source is polled")
    always_relevant: bool = Field(False, description="Items skip the regional keyword filter")
    error_count: int = Field(0, description="Consecutive failed fetches", ge=0)
    last_error: Optional[str] = Field(None, description="Message of the most recent failure")
    last_fetched_at: Optional[datetime] = Field(None, description="Last fetch attempt")
    last_success_at: Optional[datetime] = Field(None, description="Last successful fetch")
