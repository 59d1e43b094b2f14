"""Database management for the news pipeline."""

from .connection import close_connection_pool, get_connection, get_connection_pool
from .init import init_database, validate_connection
from .storage import InsertResult, PostgresStorage, Storage

__all__ = [
    "get_connection",
    "get_connection_pool",
    "close_connection_pool",
    "init_database",
    "validate_connection",
    "InsertResult",
    "PostgresStorage",
    "Storage",
]
