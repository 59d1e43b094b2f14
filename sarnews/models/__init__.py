"""Data models for the news pipeline."""

from .article import Article
from .refresh import RefreshState, RefreshStatus
from .source import Source

__all__ = ["Article", "RefreshState", "RefreshStatus", "Source"]
