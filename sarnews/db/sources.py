"""Feed registry storage."""

from typing import Any, Dict, List, Optional

from psycopg import Connection

from ..models import Source

DEFAULT_SOURCES: List[Dict[str, Any]] = [
    {"name": "Borneo Post", "url": "https://www.theborneopost.com/feed/", "always_relevant": True},
    {"name": "Dayak Daily", "url": "https://dayakdaily.com/feed/", "always_relevant": True},
    {"name": "The Star", "url": "https://www.thestar.com.my/rss/News/Nation/", "always_relevant": False},
    {
        "name": "Free Malaysia Today",
        "url": "https://www.freemalaysiatoday.com/category/nation/feed/",
        "always_relevant": False,
    },
]

# Seeded inactive so operators opt in.
RECOMMENDED_SOURCES: List[Dict[str, Any]] = [
    {"name": "Malay Mail (All)", "url": "https://www.malaymail.com/feed/rss"},
    {"name": "Malay Mail (Malaysia)", "url": "https://www.malaymail.com/feed/rss/malaysia"},
    {"name": "Astro Awani (Latest)", "url": "https://rss.astroawani.com/rss/latest/public"},
    {"name": "Astro Awani (National)", "url": "https://rss.astroawani.com/rss/national/public"},
]

_UPDATABLE_FIELDS = ("name", "url", "is_active", "always_relevant")


class SourceManager:
    """Manage sources in database."""

    def get_sources(self, conn: Connection, active_only: bool = False) -> List[Source]:
        """Get sources in registry order (by name, then id)."""
        query = "SELECT * FROM sources"
        if active_only:
            query += " WHERE is_active = TRUE"
        query += " ORDER BY name ASC, id ASC"

        with conn.cursor() as cur:
            cur.execute(query)
            return [Source.model_validate(row) for row in cur.fetchall()]

    def get_source(self, conn: Connection, source_id: int) -> Optional[Source]:
        """Get a source by ID."""
        with conn.cursor() as cur:
            cur.execute("SELECT * FROM sources WHERE id = %s", (source_id,))
            row = cur.fetchone()
        return Source.model_validate(row) if row else None

    def add_source(
        self,
        conn: Connection,
        name: str,
        url: str,
        always_relevant: bool = False,
        is_active: bool = True,
    ) -> Optional[Source]:
        """
        Add a source.

        Returns:
            The new source, or None if the URL is already registered
        """
        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO sources (name, url, always_relevant, is_active)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (url) DO NOTHING
                RETURNING *
                """,
                (name, url, always_relevant, is_active),
            )
            row = cur.fetchone()
        conn.commit()
        return Source.model_validate(row) if row else None

    def update_source(self, conn: Connection, source_id: int, **updates: Any) -> bool:
        """Update name, url, is_active or always_relevant."""
        fields = [(k, v) for k, v in updates.items() if k in _UPDATABLE_FIELDS and v is not None]
        if not fields:
            return False

        assignments = ", ".join(f"{name} = %s" for name, _ in fields)
        values = [value for _, value in fields] + [source_id]
        with conn.cursor() as cur:
            cur.execute(f"UPDATE sources SET {assignments} WHERE id = %s", values)
            changed = cur.rowcount > 0
        conn.commit()
        return changed

    def toggle_source(self, conn: Connection, source_id: int) -> Optional[bool]:
        """Flip the active flag; returns the new value."""
        with conn.cursor() as cur:
            cur.execute(
                "UPDATE sources SET is_active = NOT is_active WHERE id = %s RETURNING is_active",
                (source_id,),
            )
            row = cur.fetchone()
        conn.commit()
        return row["is_active"] if row else None

    def remove_source(self, conn: Connection, source_id: int) -> bool:
        """Delete a source. Administrative only; the pipeline never calls this."""
        with conn.cursor() as cur:
            cur.execute("DELETE FROM sources WHERE id = %s", (source_id,))
            removed = cur.rowcount > 0
        conn.commit()
        return removed

    def record_outcome(
        self,
        conn: Connection,
        source_id: int,
        ok: bool,
        message: Optional[str] = None,
    ) -> None:
        """Record the result of one fetch attempt, committed immediately."""
        with conn.cursor() as cur:
            if ok:
                cur.execute(
                    """
                    UPDATE sources
                    SET error_count = 0,
                        last_error = NULL,
                        last_fetched_at = CURRENT_TIMESTAMP,
                        last_success_at = CURRENT_TIMESTAMP
                    WHERE id = %s
                    """,
                    (source_id,),
                )
            else:
                cur.execute(
                    """
                    UPDATE sources
                    SET error_count = error_count + 1,
                        last_error = %s,
                        last_fetched_at = CURRENT_TIMESTAMP
                    WHERE id = %s
                    """,
                    (message or "Unknown error", source_id),
                )
        conn.commit()

    def seed_default_sources(self, conn: Connection) -> int:
        """
        Insert the default and recommended feeds if missing.

        Returns:
            Number of sources inserted
        """
        inserted = 0
        with conn.cursor() as cur:
            rows = [(s["name"], s["url"], s["always_relevant"], True) for s in DEFAULT_SOURCES]
            rows += [(s["name"], s["url"], False, False) for s in RECOMMENDED_SOURCES]
            for row in rows:
                cur.execute(
                    """
                    INSERT INTO sources (name, url, always_relevant, is_active)
                    VALUES (%s, %s, %s, %s)
                    ON CONFLICT (url) DO NOTHING
                    """,
                    row,
                )
                inserted += cur.rowcount
        conn.commit()
        return inserted
