"""RSS feed fetcher."""

import asyncio
import calendar
import html
import logging
import re
from datetime import datetime
from typing import Any, List, Optional

import feedparser
import httpx
import pendulum

from ..exceptions import FeedError, FeedParseError, FeedTransportError
from ..models import Source
from .models import FeedItem, FeedResult

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")


def strip_html(value: Optional[str]) -> Optional[str]:
    """Reduce an HTML fragment to collapsed plain text."""
    if not value:
        return None
    text = html.unescape(_TAG_RE.sub(" ", value))
    text = _SPACE_RE.sub(" ", text).strip()
    return text or None


def _entry_value(entry: Any, key: str) -> Optional[str]:
    value = entry.get(key)
    if isinstance(value, str):
        value = value.strip()
    return value or None


def parse_published(entry: Any) -> Optional[datetime]:
    """Publication time from feedparser's UTC time tuples."""
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed:
            try:
                return pendulum.from_timestamp(calendar.timegm(parsed), tz="UTC")
            except (TypeError, ValueError, OverflowError):
                continue
    return None


def parse_feed(source_name: str, content: str) -> List[FeedItem]:
    """Parse feed text into items."""
    feed = feedparser.parse(content)

    if feed.bozo:
        if not feed.entries:
            raise FeedParseError(source_name, f"Invalid RSS feed: {feed.bozo_exception}")
        logger.warning("Feed %s parsed with warnings: %s", source_name, feed.bozo_exception)

    items = []
    for entry in feed.entries:
        snippet = entry.get("summary") or entry.get("description")
        items.append(
            FeedItem(
                title=strip_html(_entry_value(entry, "title")),
                link=_entry_value(entry, "link"),
                snippet=strip_html(snippet),
                published=parse_published(entry),
                source_name=source_name,
            )
        )
    return items


class RSSFetcher:
    """Fetch and parse RSS feeds."""

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = "SarawakNews/1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize RSS fetcher."""
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

    async def _download(self, source: Source) -> str:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/rss+xml, application/atom+xml, application/xml, text/xml",
        }
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers=headers,
            transport=self.transport,
        ) as client:
            try:
                response = await client.get(source.url)
                response.raise_for_status()
            except httpx.TimeoutException:
                raise FeedTransportError(source.name, "Request timed out")
            except httpx.HTTPStatusError as e:
                raise FeedTransportError(source.name, f"HTTP {e.response.status_code}")
            except httpx.HTTPError as e:
                raise FeedTransportError(source.name, f"HTTP error: {e}")
            return response.text

    async def fetch_items(self, source: Source) -> List[FeedItem]:
        """Fetch and parse one feed, raising FeedError on failure."""
        try:
            # httpx timeouts are per phase; this bounds the whole download
            content = await asyncio.wait_for(self._download(source), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise FeedTransportError(source.name, "Request timed out")
        return parse_feed(source.name, content)

    async def fetch_feed(self, source: Source) -> FeedResult:
        """Fetch and parse a single RSS feed."""
        try:
            items = await self.fetch_items(source)
        except FeedError as e:
            return FeedResult(
                source_name=source.name,
                source_url=source.url,
                success=False,
                error=e.message,
            )
        except Exception as e:
            logger.exception("Unexpected error fetching %s", source.name)
            return FeedResult(
                source_name=source.name,
                source_url=source.url,
                success=False,
                error=f"Unexpected error: {e}",
            )

        return FeedResult(
            source_name=source.name,
            source_url=source.url,
            success=True,
            items=items,
            item_count=len(items),
        )
