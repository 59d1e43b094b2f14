"""Error/health side channel."""

import logging
import traceback
from typing import Optional

from ..db.storage import Storage
from ..exceptions import StorageError

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
}


class ErrorReporter:
    """Write failures to the error log table and mirror them to logging."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    def report(
        self,
        level: str,
        type: str,
        message: str,
        exc: Optional[BaseException] = None,
        endpoint: Optional[str] = None,
    ) -> None:
        """Record one entry. Never raises on storage failure."""
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {level}")

        stack_trace = None
        if exc is not None:
            stack_trace = "".join(traceback.format_exception(exc))

        logger.log(_LOG_LEVELS[level], "[%s] %s", type.upper(), message)

        try:
            self.storage.add_error_log(level, type, message, stack_trace, endpoint)
        except StorageError as e:
            logger.error("Failed to persist error log entry: %s", e)

    def feed_error(self, source_name: str, message: str) -> None:
        """A source failed to fetch or parse."""
        self.report("warning", "rss", f"RSS feed error for {source_name}: {message}")

    def api_error(self, endpoint: str, exc: BaseException) -> None:
        """An HTTP trigger failed unexpectedly."""
        self.report("error", "api", str(exc) or "API Error", exc=exc, endpoint=endpoint)

    def database_error(self, operation: str, exc: BaseException) -> None:
        """A storage operation failed."""
        self.report("error", "database", f"Database error during {operation}: {exc}", exc=exc)

    def warning(self, message: str, type: str = "other") -> None:
        """General warning."""
        self.report("warning", type, message)
