"""RSS ingestion."""

from .models import FeedItem, FeedResult, FetchOutcome, SourceOutcome
from .rss_fetcher import RSSFetcher, parse_feed
from .worker import IngestWorker

__all__ = [
    "RSSFetcher",
    "IngestWorker",
    "FeedItem",
    "FeedResult",
    "FetchOutcome",
    "SourceOutcome",
    "parse_feed",
]
