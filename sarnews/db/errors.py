"""Error log storage."""

from typing import Optional

from psycopg import Connection


class ErrorLogStore:
    """Append-only error_logs table."""

    def add(
        self,
        conn: Connection,
        level: str,
        type: str,
        message: str,
        stack_trace: Optional[str] = None,
        endpoint: Optional[str] = None,
    ) -> None:
        """Insert one log entry."""
        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO error_logs (level, type, message, stack_trace, endpoint)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (level, type, message, stack_trace, endpoint),
            )
        conn.commit()
