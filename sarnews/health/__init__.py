"""Error reporting and feed health."""

from .feeds import FeedHealthReport, evaluate_feed_health, is_unhealthy
from .reporter import ErrorReporter

__all__ = ["ErrorReporter", "FeedHealthReport", "evaluate_feed_health", "is_unhealthy"]
