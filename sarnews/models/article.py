"""Article model for ingested news items."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import DBModel


class Article(DBModel):
    """Ingested, deduplicated news item."""

    title: str = Field(..., description="Original title")
    title_zh: Optional[str] = Field(None, description="Chinese title")
    title_ms: Optional[str] = Field(None, description="Malay title")
    source_url: str = Field(..., description="Article URL, the dedup key")
    source_name: str = Field(..., description="Name of the source it came from")
    published_at: Optional[datetime] = Field(None, description="Publication timestamp")
    category: str = Field("general", description="Assigned topical category")
    subregion: str = Field("sarawak", description="Assigned locality")
    clicks: int = Field(0, description="Click counter")
    comment_count: int = Field(0, description="Comment counter")
    translation_attempted_at: Optional[datetime] = Field(
        None, description="Last backfill attempt"
    )

    @property
    def needs_translation(self) -> bool:
        """Whether either translated title is missing."""
        return not (self.title_zh and self.title_ms)
