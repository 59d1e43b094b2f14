"""Key/value application metadata."""

from typing import Dict, Iterable, Mapping, Optional

from psycopg import Connection

_UPSERT_SQL = """
    INSERT INTO app_metadata (key, value, updated_at)
    VALUES (%s, %s, CURRENT_TIMESTAMP)
    ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value, updated_at = CURRENT_TIMESTAMP
"""


class MetadataStore:
    """Read and write app_metadata rows."""

    def get(self, conn: Connection, key: str) -> Optional[str]:
        """Get a value, or None if unset."""
        with conn.cursor() as cur:
            cur.execute("SELECT value FROM app_metadata WHERE key = %s", (key,))
            row = cur.fetchone()
        return row["value"] if row else None

    def get_many(self, conn: Connection, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        """Get several values at once; missing keys map to None."""
        keys = list(keys)
        with conn.cursor() as cur:
            cur.execute("SELECT key, value FROM app_metadata WHERE key = ANY(%s)", (keys,))
            found = {row["key"]: row["value"] for row in cur.fetchall()}
        return {key: found.get(key) for key in keys}

    def set(self, conn: Connection, key: str, value: str) -> None:
        """Upsert one value."""
        with conn.cursor() as cur:
            cur.execute(_UPSERT_SQL, (key, value))
        conn.commit()

    def set_many(self, conn: Connection, values: Mapping[str, str]) -> None:
        """Upsert several values in a single transaction."""
        with conn.transaction():
            with conn.cursor() as cur:
                cur.executemany(_UPSERT_SQL, list(values.items()))
