"""Common repositories."""

from app.repositories.common.cache import KeyValueRepository

__all__ = [
    "KeyValueRepository",
]
