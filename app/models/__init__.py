"""Models package - DDL for the persistent medium."""

from app.models.common import CACHE_DDL

ALL_DDL = [
    CACHE_DDL,
]

__all__ = [
    "CACHE_DDL",
    "ALL_DDL",
]
