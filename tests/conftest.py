from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Union

import httpx
import pendulum
import pytest

from sarnews.db.storage import InsertResult
from sarnews.exceptions import StorageError, StorageUnavailableError
from sarnews.models import Article, Source

NOW = pendulum.datetime(2025, 10, 6, 8, 0, 0, tz="UTC")


class InMemoryStorage:
    """Storage fake with the same contract as PostgresStorage."""

    def __init__(self) -> None:
        self.sources: Dict[int, Source] = {}
        self.articles: Dict[str, Article] = {}
        self.metadata: Dict[str, str] = {}
        self.error_logs: List[Dict[str, Any]] = []
        self.metadata_writes = 0
        self.fail_urls: Set[str] = set()
        self.unavailable = False
        self._next_id = 1

    def _check(self) -> None:
        if self.unavailable:
            raise StorageUnavailableError("connection refused")

    def _new_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    # Registry

    def add_source(
        self,
        name: str,
        url: str,
        always_relevant: bool = False,
        is_active: bool = True,
        **extra: Any,
    ) -> Source:
        source = Source(
            id=self._new_id(),
            name=name,
            url=url,
            always_relevant=always_relevant,
            is_active=is_active,
            created_at=extra.pop("created_at", NOW.subtract(days=30)),
            **extra,
        )
        self.sources[source.id] = source
        return source

    def list_sources(self) -> List[Source]:
        self._check()
        return sorted(self.sources.values(), key=lambda s: (s.name, s.id))

    def list_active_sources(self) -> List[Source]:
        return [s for s in self.list_sources() if s.is_active]

    def record_source_outcome(self, source_id: int, ok: bool, message: Optional[str] = None) -> None:
        self._check()
        source = self.sources[source_id]
        now = pendulum.now("UTC")
        if ok:
            update = {"error_count": 0, "last_error": None, "last_fetched_at": now, "last_success_at": now}
        else:
            update = {
                "error_count": source.error_count + 1,
                "last_error": message or "Unknown error",
                "last_fetched_at": now,
            }
        self.sources[source_id] = source.model_copy(update=update)

    # Articles

    def insert_article_if_absent(self, url: str, fields: Dict[str, Any]) -> InsertResult:
        self._check()
        if url in self.fail_urls:
            raise StorageError(f"insert failed for {url}")
        if url in self.articles:
            return InsertResult(False, None)

        article = Article(
            id=self._new_id(),
            source_url=url,
            created_at=pendulum.now("UTC"),
            **fields,
        )
        self.articles[url] = article
        return InsertResult(True, article.id)

    def add_article(self, title: str, url: str, **fields: Any) -> Article:
        fields.setdefault("source_name", "Borneo Post")
        self.insert_article_if_absent(url, {"title": title, **fields})
        return self.articles[url]

    def article_by_id(self, article_id: int) -> Article:
        return next(a for a in self.articles.values() if a.id == article_id)

    def get_untranslated_articles(self, limit: int) -> List[Article]:
        self._check()
        pending = [a for a in self.articles.values() if a.needs_translation]
        pending.sort(
            key=lambda a: (
                a.translation_attempted_at is not None,
                a.translation_attempted_at.timestamp() if a.translation_attempted_at else 0,
                a.created_at.timestamp() if a.created_at else 0,
                a.id,
            )
        )
        return pending[:limit]

    def count_untranslated_articles(self) -> int:
        return len([a for a in self.articles.values() if a.needs_translation])

    def set_article_translations(
        self, article_id: int, title_zh: Optional[str] = None, title_ms: Optional[str] = None
    ) -> None:
        self._check()
        article = self.article_by_id(article_id)
        self.articles[article.source_url] = article.model_copy(
            update={
                "title_zh": title_zh if title_zh is not None else article.title_zh,
                "title_ms": title_ms if title_ms is not None else article.title_ms,
                "translation_attempted_at": pendulum.now("UTC"),
            }
        )

    # Metadata

    def get_metadata(self, key: str) -> Optional[str]:
        self._check()
        return self.metadata.get(key)

    def get_metadata_many(self, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        self._check()
        return {key: self.metadata.get(key) for key in keys}

    def set_metadata(self, key: str, value: str) -> None:
        self._check()
        self.metadata[key] = value
        self.metadata_writes += 1

    def set_metadata_many(self, values: Mapping[str, str]) -> None:
        self._check()
        self.metadata.update(values)
        self.metadata_writes += 1

    # Error log

    def add_error_log(
        self,
        level: str,
        type: str,
        message: str,
        stack_trace: Optional[str] = None,
        endpoint: Optional[str] = None,
    ) -> None:
        self._check()
        self.error_logs.append(
            {
                "level": level,
                "type": type,
                "message": message,
                "stack_trace": stack_trace,
                "endpoint": endpoint,
            }
        )


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: pendulum.DateTime = NOW) -> None:
        self.now = start

    def __call__(self) -> pendulum.DateTime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now = self.now.add(**kwargs)


def rss_document(items: List[Dict[str, Optional[str]]], title: str = "Test Feed") -> str:
    """Minimal RSS 2.0 document; keys with None values are left out."""
    entries = []
    for item in items:
        parts = []
        for tag in ("title", "link", "description", "pubDate"):
            if item.get(tag) is not None:
                value = f"<![CDATA[{item[tag]}]]>" if tag == "description" else item[tag]
                parts.append(f"<{tag}>{value}</{tag}>")
        entries.append(f"<item>{''.join(parts)}</item>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel>'
        f"<title>{title}</title><link>https://example.com/</link><description>Test</description>"
        f"{''.join(entries)}"
        "</channel></rss>"
    )


def feed_transport(feeds: Mapping[str, Union[str, int, Exception]]) -> httpx.MockTransport:
    """Serve RSS bodies by URL; ints are returned as status codes, exceptions are raised."""

    def handler(request: httpx.Request) -> httpx.Response:
        body = feeds.get(str(request.url))
        if body is None:
            return httpx.Response(404)
        if isinstance(body, Exception):
            raise body
        if isinstance(body, int):
            return httpx.Response(body)
        return httpx.Response(200, text=body, headers={"Content-Type": "application/rss+xml"})

    return httpx.MockTransport(handler)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def sample_items():
    return [
        {
            "title": "New bridge opens in Kuching",
            "link": "https://example.com/kuching-bridge",
            "description": "<p>The <b>bridge</b> was completed ahead of schedule.</p>",
            "pubDate": "Mon, 06 Oct 2025 08:00:00 +0800",
        },
        {
            "title": "Sarawak shuttler wins badminton title",
            "link": "https://example.com/badminton",
            "description": "A proud day.",
            "pubDate": "Mon, 06 Oct 2025 09:30:00 +0800",
        },
        {
            "title": "Selangor traffic update",
            "link": "https://example.com/selangor-traffic",
            "description": "Jams in Shah Alam.",
            "pubDate": "Mon, 06 Oct 2025 10:00:00 +0800",
        },
    ]
