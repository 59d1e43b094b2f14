"""Fetch-and-ingest worker."""

import logging
from typing import Callable, Iterable, Optional

import pendulum

from ..classifier import KeywordClassifier
from ..db.storage import Storage
from ..exceptions import StorageError, StorageUnavailableError
from ..health import ErrorReporter
from ..models import Source
from .models import FeedItem, FetchOutcome, SourceOutcome
from .rss_fetcher import RSSFetcher

logger = logging.getLogger(__name__)


class IngestWorker:
    """Fetch each active source, classify its items and store the relevant ones.

    Sources are processed one at a time in the order given. A failure in one
    source is recorded against it and reported, and the next source is still
    attempted. Only ``StorageUnavailableError`` escapes.
    """

    def __init__(
        self,
        storage: Storage,
        fetcher: Optional[RSSFetcher] = None,
        classifier: Optional[KeywordClassifier] = None,
        reporter: Optional[ErrorReporter] = None,
        clock: Callable[[], pendulum.DateTime] = lambda: pendulum.now("UTC"),
    ) -> None:
        self.storage = storage
        self.fetcher = fetcher or RSSFetcher()
        self.classifier = classifier or KeywordClassifier()
        self.reporter = reporter
        self.clock = clock

    def _store_item(self, source: Source, item: FeedItem, outcome: SourceOutcome) -> None:
        classification = self.classifier.classify(
            item.title,
            item.snippet,
            always_relevant=source.always_relevant,
            source_name=source.name,
        )
        if not classification.in_scope:
            return
        outcome.relevant += 1

        fields = {
            "title": item.title,
            "source_name": source.name,
            "published_at": item.published or self.clock(),
            "category": classification.category,
            "subregion": classification.subregion,
        }
        try:
            result = self.storage.insert_article_if_absent(item.link, fields)
        except StorageUnavailableError:
            raise
        except StorageError as e:
            outcome.failed_items += 1
            logger.error("Failed to store %s from %s: %s", item.link, source.name, e)
            if self.reporter:
                self.reporter.database_error(f"insert of {item.link}", e)
            return

        if result.inserted:
            outcome.added += 1

    def _record(self, source: Source, ok: bool, message: Optional[str] = None) -> None:
        if source.id is None:
            return
        try:
            self.storage.record_source_outcome(source.id, ok, message)
        except StorageUnavailableError:
            raise
        except StorageError as e:
            logger.error("Failed to record fetch outcome for %s: %s", source.name, e)

    async def ingest_source(self, source: Source) -> SourceOutcome:
        """Fetch one source and store its relevant items."""
        outcome = SourceOutcome(source_id=source.id, source_name=source.name)
        result = await self.fetcher.fetch_feed(source)

        if not result.success:
            message = result.error or "Unknown error"
            outcome.success = False
            outcome.error = f"Failed to fetch {source.name}: {message}"
            logger.warning("%s", outcome.error)
            self._record(source, False, message)
            if self.reporter:
                self.reporter.feed_error(source.name, message)
            return outcome

        for item in result.items:
            if not item.title or not item.link:
                continue
            outcome.total += 1
            self._store_item(source, item, outcome)

        self._record(source, True)

        logger.debug(
            "%s: %d items, %d relevant, %d added",
            source.name,
            outcome.total,
            outcome.relevant,
            outcome.added,
        )
        return outcome

    async def ingest_all(self, sources: Iterable[Source]) -> FetchOutcome:
        """Process sources sequentially and aggregate their outcomes."""
        outcome = FetchOutcome()
        for source in sources:
            outcome.add(await self.ingest_source(source))
        return outcome
