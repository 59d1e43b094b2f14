"""Database connection management."""

import logging
import os
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

logger = logging.getLogger(__name__)


class DatabaseConfig:
    """Connection settings resolved from the postgres config section."""

    def __init__(self, config: Dict[str, Any]) -> None:
        self.host = config.get("host", "localhost")
        self.port = config.get("port", 5432)
        self.database = config.get("database", "sarnews")
        self.user = config.get("user", "sarnews")
        self.connect_timeout = config.get("connect_timeout", 10)
        self.pool_min_size = config.get("pool_min_size", 1)
        self.pool_max_size = config.get("pool_max_size", 10)

        # Environment wins over a password written into the config file
        password_env = config.get("password_env")
        if password_env and os.environ.get(password_env):
            self.password = os.environ[password_env]
        else:
            self.password = config.get("password") or None

    @property
    def conninfo(self) -> str:
        """libpq connection string; values are quoted by psycopg."""
        return make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=self.password,
            connect_timeout=self.connect_timeout,
            application_name="sarnews",
        )


_connection_pool: Optional[ConnectionPool] = None


def get_connection_pool(config: Dict[str, Any]) -> ConnectionPool:
    """Get or create the process-wide pool."""
    global _connection_pool
    if _connection_pool is None:
        db_config = DatabaseConfig(config)
        logger.debug("Opening connection pool to %s:%s/%s", db_config.host, db_config.port, db_config.database)
        _connection_pool = ConnectionPool(
            db_config.conninfo,
            min_size=db_config.pool_min_size,
            max_size=db_config.pool_max_size,
            timeout=db_config.connect_timeout,
            kwargs={"row_factory": dict_row},
            open=True,
        )
    return _connection_pool


def close_connection_pool() -> None:
    """Close the shared pool, if one was opened."""
    global _connection_pool
    if _connection_pool is not None:
        _connection_pool.close()
        _connection_pool = None


@contextmanager
def get_connection(config: Dict[str, Any]) -> Generator[psycopg.Connection, None, None]:
    """Borrow a connection; it is committed or rolled back on return."""
    pool = get_connection_pool(config)
    with pool.connection() as conn:
        yield conn
