"""Repositories package - data access layer for the local cache database."""

from app.repositories.base import BaseRepository
from app.repositories.common import KeyValueRepository
from app.repositories.db import (
    close_db,
    connect,
    get_db,
    init_tables,
)

__all__ = [
    # DB
    "connect",
    "get_db",
    "close_db",
    "init_tables",
    # Base
    "BaseRepository",
    # Common
    "KeyValueRepository",
]
