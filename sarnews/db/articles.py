"""Article storage and deduplication."""

from typing import Any, Dict, List, Optional

from psycopg import Connection

from ..models import Article

_INSERT_COLUMNS = ("title", "source_name", "published_at", "category", "subregion")


class ArticleStorage:
    """Handle article storage and deduplication."""

    def insert_if_absent(
        self,
        conn: Connection,
        url: str,
        fields: Dict[str, Any],
    ) -> Optional[int]:
        """
        Insert an article keyed by its source URL.

        Returns:
            New article ID, or None if the URL was already stored
        """
        values = [fields.get(column) for column in _INSERT_COLUMNS]
        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO articles (
                    source_url, title, source_name, published_at, category, subregion
                ) VALUES (
                    %s, %s, %s, %s, COALESCE(%s, 'general'), COALESCE(%s, 'sarawak')
                )
                ON CONFLICT (source_url) DO NOTHING
                RETURNING id
                """,
                [url, *values],
            )
            row = cur.fetchone()
        conn.commit()
        return row["id"] if row else None

    def get_untranslated(self, conn: Connection, limit: int = 100) -> List[Article]:
        """Articles missing a translated title, least recently attempted first."""
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT * FROM articles
                WHERE title_zh IS NULL OR title_ms IS NULL
                ORDER BY translation_attempted_at ASC NULLS FIRST, created_at ASC, id ASC
                LIMIT %s
                """,
                (limit,),
            )
            return [Article.model_validate(row) for row in cur.fetchall()]

    def count_untranslated(self, conn: Connection) -> int:
        """Number of articles still missing a translation."""
        with conn.cursor() as cur:
            cur.execute(
                "SELECT COUNT(*) AS count FROM articles WHERE title_zh IS NULL OR title_ms IS NULL"
            )
            return cur.fetchone()["count"]

    def set_translations(
        self,
        conn: Connection,
        article_id: int,
        title_zh: Optional[str],
        title_ms: Optional[str],
    ) -> None:
        """Persist translations; a None never clears an existing title."""
        with conn.cursor() as cur:
            cur.execute(
                """
                UPDATE articles
                SET title_zh = COALESCE(%s, title_zh),
                    title_ms = COALESCE(%s, title_ms),
                    translation_attempted_at = CURRENT_TIMESTAMP
                WHERE id = %s
                """,
                (title_zh, title_ms, article_id),
            )
        conn.commit()
