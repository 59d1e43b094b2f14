"""Feed health evaluation over registry data."""

from datetime import datetime
from typing import Iterable, List, Optional

import pendulum
from pydantic import BaseModel, Field, computed_field

from ..models import Source

ERROR_THRESHOLD = 3
STALE_AFTER_HOURS = 24


class StaleFeed(BaseModel):
    """Active feed without a recent successful fetch."""

    id: Optional[int] = None
    name: str
    last_success_at: Optional[datetime] = None
    hours_since_success: float


class ErrorFeed(BaseModel):
    """Active feed failing repeatedly."""

    id: Optional[int] = None
    name: str
    error_count: int
    last_error: Optional[str] = None


class FeedHealthReport(BaseModel):
    """Health summary across active feeds."""

    stale_feeds: List[StaleFeed] = Field(default_factory=list)
    error_feeds: List[ErrorFeed] = Field(default_factory=list)

    @computed_field
    @property
    def healthy(self) -> bool:
        """No stale and no failing feeds."""
        return not self.stale_feeds and not self.error_feeds


def _hours_since_success(source: Source, now: datetime) -> float:
    # Never-fetched feeds age from when they were registered
    reference = source.last_success_at or source.created_at
    if reference is None:
        return float("inf")
    return round((now - pendulum.instance(reference)).total_seconds() / 3600, 1)


def is_unhealthy(source: Source, now: Optional[datetime] = None) -> bool:
    """Three or more consecutive failures, or no success within a day."""
    now = pendulum.instance(now) if now else pendulum.now("UTC")
    if source.error_count >= ERROR_THRESHOLD:
        return True
    return _hours_since_success(source, now) >= STALE_AFTER_HOURS


def evaluate_feed_health(sources: Iterable[Source], now: Optional[datetime] = None) -> FeedHealthReport:
    """Classify active sources into stale and failing sets."""
    now = pendulum.instance(now) if now else pendulum.now("UTC")
    report = FeedHealthReport()

    for source in sources:
        if not source.is_active:
            continue

        hours = _hours_since_success(source, now)
        if hours >= STALE_AFTER_HOURS:
            report.stale_feeds.append(
                StaleFeed(
                    id=source.id,
                    name=source.name,
                    last_success_at=source.last_success_at,
                    hours_since_success=hours if hours != float("inf") else -1.0,
                )
            )

        if source.error_count >= ERROR_THRESHOLD:
            report.error_feeds.append(
                ErrorFeed(
                    id=source.id,
                    name=source.name,
                    error_count=source.error_count,
                    last_error=source.last_error,
                )
            )

    return report
