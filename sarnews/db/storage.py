"""Storage interface consumed by the pipeline, and its Postgres implementation."""

from contextlib import contextmanager
from typing import Any, Dict, Generator, Iterable, List, Mapping, NamedTuple, Optional, Protocol

import psycopg

from ..exceptions import StorageError, StorageUnavailableError
from ..models import Article, Source
from .articles import ArticleStorage
from .connection import get_connection
from .errors import ErrorLogStore
from .metadata import MetadataStore
from .sources import SourceManager


class InsertResult(NamedTuple):
    """Outcome of an insert-if-absent."""

    inserted: bool
    article_id: Optional[int] = None


class Storage(Protocol):
    """What the refresh pipeline needs from persistent storage."""

    def insert_article_if_absent(self, url: str, fields: Dict[str, Any]) -> InsertResult: ...

    def list_active_sources(self) -> List[Source]: ...

    def list_sources(self) -> List[Source]: ...

    def record_source_outcome(self, source_id: int, ok: bool, message: Optional[str] = None) -> None: ...

    def get_untranslated_articles(self, limit: int) -> List[Article]: ...

    def set_article_translations(
        self, article_id: int, title_zh: Optional[str] = None, title_ms: Optional[str] = None
    ) -> None: ...

    def get_metadata(self, key: str) -> Optional[str]: ...

    def get_metadata_many(self, keys: Iterable[str]) -> Dict[str, Optional[str]]: ...

    def set_metadata(self, key: str, value: str) -> None: ...

    def set_metadata_many(self, values: Mapping[str, str]) -> None: ...

    def add_error_log(
        self,
        level: str,
        type: str,
        message: str,
        stack_trace: Optional[str] = None,
        endpoint: Optional[str] = None,
    ) -> None: ...


class PostgresStorage:
    """Storage backed by the shared psycopg connection pool."""

    def __init__(self, db_config: Dict[str, Any]) -> None:
        self.db_config = db_config
        self.articles = ArticleStorage()
        self.sources = SourceManager()
        self.metadata = MetadataStore()
        self.error_logs = ErrorLogStore()

    @contextmanager
    def connection(self) -> Generator[psycopg.Connection, None, None]:
        """Pooled connection with psycopg errors mapped to storage errors."""
        try:
            with get_connection(self.db_config) as conn:
                yield conn
        except psycopg.OperationalError as e:
            raise StorageUnavailableError(str(e)) from e
        except psycopg.DatabaseError as e:
            raise StorageError(str(e)) from e

    # Pipeline interface

    def insert_article_if_absent(self, url: str, fields: Dict[str, Any]) -> InsertResult:
        with self.connection() as conn:
            article_id = self.articles.insert_if_absent(conn, url, fields)
        return InsertResult(article_id is not None, article_id)

    def list_active_sources(self) -> List[Source]:
        with self.connection() as conn:
            return self.sources.get_sources(conn, active_only=True)

    def record_source_outcome(self, source_id: int, ok: bool, message: Optional[str] = None) -> None:
        with self.connection() as conn:
            self.sources.record_outcome(conn, source_id, ok, message)

    def get_untranslated_articles(self, limit: int) -> List[Article]:
        with self.connection() as conn:
            return self.articles.get_untranslated(conn, limit)

    def set_article_translations(
        self, article_id: int, title_zh: Optional[str] = None, title_ms: Optional[str] = None
    ) -> None:
        with self.connection() as conn:
            self.articles.set_translations(conn, article_id, title_zh, title_ms)

    def get_metadata(self, key: str) -> Optional[str]:
        with self.connection() as conn:
            return self.metadata.get(conn, key)

    def get_metadata_many(self, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        with self.connection() as conn:
            return self.metadata.get_many(conn, keys)

    def set_metadata(self, key: str, value: str) -> None:
        with self.connection() as conn:
            self.metadata.set(conn, key, value)

    def set_metadata_many(self, values: Mapping[str, str]) -> None:
        with self.connection() as conn:
            self.metadata.set_many(conn, values)

    def add_error_log(
        self,
        level: str,
        type: str,
        message: str,
        stack_trace: Optional[str] = None,
        endpoint: Optional[str] = None,
    ) -> None:
        with self.connection() as conn:
            self.error_logs.add(conn, level, type, message, stack_trace, endpoint)

    # Registry administration

    def list_sources(self) -> List[Source]:
        with self.connection() as conn:
            return self.sources.get_sources(conn)

    def get_source(self, source_id: int) -> Optional[Source]:
        with self.connection() as conn:
            return self.sources.get_source(conn, source_id)

    def add_source(self, name: str, url: str, always_relevant: bool = False) -> Optional[Source]:
        with self.connection() as conn:
            return self.sources.add_source(conn, name, url, always_relevant)

    def update_source(self, source_id: int, **updates: Any) -> bool:
        with self.connection() as conn:
            return self.sources.update_source(conn, source_id, **updates)

    def toggle_source(self, source_id: int) -> Optional[bool]:
        with self.connection() as conn:
            return self.sources.toggle_source(conn, source_id)

    def remove_source(self, source_id: int) -> bool:
        with self.connection() as conn:
            return self.sources.remove_source(conn, source_id)

    def seed_default_sources(self) -> int:
        with self.connection() as conn:
            return self.sources.seed_default_sources(conn)

    def count_untranslated_articles(self) -> int:
        with self.connection() as conn:
            return self.articles.count_untranslated(conn)
