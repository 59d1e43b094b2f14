"""Data models for ingestion."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class FeedItem(BaseModel):
    """Parsed RSS feed item. Title or link may be missing in malformed feeds."""

    title: Optional[str] = Field(None, description="Article title")
    link: Optional[str] = Field(None, description="Article URL")
    snippet: Optional[str] = Field(None, description="Plain-text summary")
    published: Optional[datetime] = Field(None, description="Publication date")
    source_name: str = Field(..., description="Source name")


class FeedResult(BaseModel):
    """Result of fetching an RSS feed."""

    source_name: str = Field(..., description="Source name")
    source_url: str = Field(..., description="RSS feed URL")
    success: bool = Field(..., description="Whether fetch was successful")
    items: List[FeedItem] = Field(default_factory=list, description="Parsed feed items")
    error: Optional[str] = Field(None, description="Error message if failed")
    item_count: int = Field(0, description="Number of items fetched")


class SourceOutcome(BaseModel):
    """Ingest result for one source within a cycle."""

    source_id: Optional[int] = Field(None, description="Source database ID")
    source_name: str = Field(..., description="Source name")
    success: bool = Field(True, description="Whether the feed was fetched and parsed")
    total: int = Field(0, description="Well-formed items seen")
    relevant: int = Field(0, description="Items that passed the relevance filter")
    added: int = Field(0, description="Articles newly inserted")
    failed_items: int = Field(0, description="Items whose insert failed")
    error: Optional[str] = Field(None, description="Error string when the source failed")


class FetchOutcome(BaseModel):
    """Aggregate of per-source outcomes for one refresh cycle."""

    total: int = Field(0, description="Well-formed items seen across sources")
    added: int = Field(0, description="Articles newly inserted across sources")
    errors: List[str] = Field(default_factory=list, description="One entry per failed source")
    sources: List[SourceOutcome] = Field(default_factory=list, description="Per-source detail")

    def add(self, outcome: SourceOutcome) -> None:
        """Fold one source's result into the aggregate."""
        self.sources.append(outcome)
        self.total += outcome.total
        self.added += outcome.added
        if outcome.error:
            self.errors.append(outcome.error)

    @property
    def error_count(self) -> int:
        return len(self.errors)
