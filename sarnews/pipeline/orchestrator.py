"""Refresh orchestrator: throttling, single-flight execution and outcome recording."""

import asyncio
import logging
import math
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

import pendulum
from pydantic import BaseModel, Field

from ..classifier import KeywordClassifier
from ..config import Config
from ..db.storage import PostgresStorage, Storage
from ..health import ErrorReporter
from ..ingestion import FetchOutcome, IngestWorker, RSSFetcher, SourceOutcome
from ..models import RefreshState, RefreshStatus
from ..models.refresh import LAST_CRON_REFRESH, LAST_REFRESH, REFRESH_STATE_KEYS
from ..translation import TranslationBackfill, create_translator

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN = timedelta(minutes=10)


class RefreshTrigger(str, Enum):
    """Who asked for a refresh."""

    MANUAL = "manual"
    SCHEDULED = "scheduled"
    PUBLIC = "public"

    @property
    def throttled(self) -> bool:
        """Only manual refreshes bypass the cooldown."""
        return self is not RefreshTrigger.MANUAL


class RefreshResult(BaseModel):
    """Outcome of an executed refresh cycle."""

    trigger: RefreshTrigger
    status: RefreshStatus
    added: int = 0
    total: int = 0
    errors: List[str] = Field(default_factory=list)
    refreshed_at: datetime
    sources: List[SourceOutcome] = Field(default_factory=list)

    def to_response(self, max_errors: Optional[int] = None) -> Dict[str, Any]:
        """Caller-facing payload."""
        errors = self.errors if max_errors is None else self.errors[:max_errors]
        return {
            "success": True,
            "status": self.status.value,
            "added": self.added,
            "total": self.total,
            "errors": errors,
            "refreshedAt": pendulum.instance(self.refreshed_at).in_timezone("UTC").to_iso8601_string(),
        }


class RefreshThrottled(BaseModel):
    """A throttled trigger arrived inside the cooldown window."""

    retry_after: int = Field(..., description="Seconds until the next refresh is allowed")
    last_refresh: Optional[datetime] = None

    def to_response(self) -> Dict[str, Any]:
        return {"error": "Refresh throttled", "retryAfter": self.retry_after}


RefreshOutcome = Union[RefreshResult, RefreshThrottled]


class RefreshOrchestrator:
    """Run refresh cycles across all active sources.

    The cooldown is always derived from the persisted ``last_refresh``
    timestamp, so it survives restarts and is shared by every process that
    uses the same storage. Cycle execution is serialized by a lock; throttled
    triggers re-check the cooldown once they hold it.
    """

    def __init__(
        self,
        storage: Storage,
        worker: IngestWorker,
        backfill: Optional[TranslationBackfill] = None,
        cooldown: timedelta = DEFAULT_COOLDOWN,
        reporter: Optional[ErrorReporter] = None,
        clock: Callable[[], pendulum.DateTime] = lambda: pendulum.now("UTC"),
    ) -> None:
        self.storage = storage
        self.worker = worker
        self.backfill = backfill
        self.cooldown = cooldown
        self.reporter = reporter
        self.clock = clock
        self._lock = asyncio.Lock()
        self._backfill_task: Optional[asyncio.Task] = None

    @classmethod
    def from_config(cls, config: Config, storage: Optional[Storage] = None) -> "RefreshOrchestrator":
        """Wire storage, fetcher, classifier and translator from configuration."""
        settings = config.config
        storage = storage or PostgresStorage(config.get_db_config())
        reporter = ErrorReporter(storage)

        fetcher = RSSFetcher(
            timeout=settings.refresh.fetch_timeout,
            user_agent=settings.refresh.user_agent,
        )
        worker = IngestWorker(
            storage,
            fetcher=fetcher,
            classifier=KeywordClassifier.from_config(settings.classifier),
            reporter=reporter,
        )
        translator = create_translator(
            config.get_translation_config(), user_agent=settings.refresh.user_agent
        )
        backfill = None
        if translator is not None:
            backfill = TranslationBackfill(
                storage,
                translator,
                batch_size=settings.translation.batch_size,
                delay_seconds=settings.translation.delay_seconds,
                timeout=settings.translation.timeout,
                targets=settings.translation.targets,
            )
        return cls(
            storage,
            worker,
            backfill=backfill,
            cooldown=timedelta(minutes=settings.refresh.cooldown_minutes),
            reporter=reporter,
        )

    @property
    def is_running(self) -> bool:
        """Whether a cycle currently holds the lock."""
        return self._lock.locked()

    def read_state(self) -> RefreshState:
        """Load the persisted refresh state."""
        return RefreshState.from_metadata(self.storage.get_metadata_many(REFRESH_STATE_KEYS))

    def seconds_until_eligible(self, state: Optional[RefreshState] = None) -> int:
        """Seconds before a throttled trigger may run; 0 when eligible now."""
        state = state or self.read_state()
        if state.last_refresh is None:
            return 0

        elapsed = self.clock() - pendulum.instance(state.last_refresh)
        remaining = min(self.cooldown, self.cooldown - elapsed).total_seconds()
        if remaining <= 0:
            return 0
        return math.ceil(remaining)

    def check_throttle(self) -> Optional[RefreshThrottled]:
        """A rejection if the cooldown has not elapsed, else None."""
        state = self.read_state()
        retry_after = self.seconds_until_eligible(state)
        if retry_after > 0:
            return RefreshThrottled(retry_after=retry_after, last_refresh=state.last_refresh)
        return None

    async def refresh(self, trigger: RefreshTrigger = RefreshTrigger.MANUAL) -> RefreshOutcome:
        """Run one refresh cycle, or reject it if a throttled trigger is too early."""
        if trigger.throttled:
            throttled = self.check_throttle()
            if throttled:
                logger.info("%s refresh throttled, retry in %ds", trigger.value, throttled.retry_after)
                return throttled

        async with self._lock:
            # Another caller may have completed a cycle while we waited
            if trigger.throttled:
                throttled = self.check_throttle()
                if throttled:
                    logger.info(
                        "%s refresh throttled after wait, retry in %ds",
                        trigger.value,
                        throttled.retry_after,
                    )
                    return throttled

            result = await self._run_cycle(trigger)

        if result.status is not RefreshStatus.ERROR:
            self.start_backfill()
        return result

    async def _run_cycle(self, trigger: RefreshTrigger) -> RefreshResult:
        sources = self.storage.list_active_sources()
        logger.info("Refreshing %d active sources (%s)", len(sources), trigger.value)

        outcome: FetchOutcome = await self.worker.ingest_all(sources)

        refreshed_at = self.clock()
        status = RefreshStatus.derive(outcome.added, outcome.error_count)
        state = RefreshState(
            last_refresh=refreshed_at,
            status=status,
            added=outcome.added,
            total=outcome.total,
            error_count=outcome.error_count,
        )
        values = state.to_metadata()
        if trigger is RefreshTrigger.SCHEDULED:
            values[LAST_CRON_REFRESH] = values[LAST_REFRESH]
        self.storage.set_metadata_many(values)

        logger.info(
            "Refresh %s: %d added, %d processed, %d errors",
            status.value,
            outcome.added,
            outcome.total,
            outcome.error_count,
        )
        return RefreshResult(
            trigger=trigger,
            status=status,
            added=outcome.added,
            total=outcome.total,
            errors=outcome.errors,
            refreshed_at=refreshed_at,
            sources=outcome.sources,
        )

    def start_backfill(self) -> Optional[asyncio.Task]:
        """Launch a backfill batch in the background unless one is running."""
        if self.backfill is None:
            return None
        if self._backfill_task is not None and not self._backfill_task.done():
            logger.debug("Translation backfill already running")
            return None
        self._backfill_task = asyncio.create_task(self._run_backfill())
        return self._backfill_task

    async def translate_now(self, limit: Optional[int] = None) -> int:
        """Run one backfill batch in the foreground once any background batch is done."""
        if self.backfill is None:
            return 0
        await self.wait_for_background()
        self._backfill_task = asyncio.create_task(self._run_backfill(limit))
        return await self._backfill_task

    async def _run_backfill(self, limit: Optional[int] = None) -> int:
        try:
            return await self.backfill.run(limit)
        except Exception as e:
            # Nobody awaits this task; surface the failure here
            logger.exception("Translation backfill failed")
            if self.reporter:
                self.reporter.report("error", "other", f"Translation backfill failed: {e}", exc=e)
            return 0

    async def wait_for_background(self) -> Optional[int]:
        """Wait for a running backfill, returning its count."""
        if self._backfill_task is None:
            return None
        return await self._backfill_task
