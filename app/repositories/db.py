"""DuckDB connection management."""

import threading

import duckdb
from loguru import logger

from app.models import ALL_DDL
from settings import DB_PATH

_local = threading.local()


def init_tables(conn: duckdb.DuckDBPyConnection) -> None:
    """Initialize all tables from DDL statements (idempotent - uses IF NOT EXISTS)."""
    for ddl in ALL_DDL:
        conn.execute(ddl)
    logger.debug("DB tables initialized")


def connect(path: str = DB_PATH) -> duckdb.DuckDBPyConnection:
    """Open a connection with all tables in place. Use ':memory:' for a throwaway store."""
    conn = duckdb.connect(path)
    init_tables(conn)
    logger.debug("DB connected: {}", path)
    return conn


def get_db() -> duckdb.DuckDBPyConnection:
    """Get thread-local connection."""
    if not hasattr(_local, "conn") or _local.conn is None:
        _local.conn = connect(DB_PATH)
    return _local.conn


def close_db() -> None:
    """Close thread-local connection."""
    if hasattr(_local, "conn") and _local.conn:
        _local.conn.close()
        _local.conn = None
        logger.debug("DB connection closed")
