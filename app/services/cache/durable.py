"""Durable TTL store - generic cache with expiry and schema invalidation."""

import time
from collections.abc import Callable
from typing import Any

from loguru import logger
from pydantic import ValidationError

from app.repositories.common import KeyValueRepository
from app.services.cache.keys import CacheKey, CacheRecord
from settings import CACHE_SCHEMA_VERSION, CACHE_TTL, DURABLE_CACHE_PREFIX


class CacheService:
    """Timestamped, schema-versioned records under a key prefix.

    A missing, unreadable, schema-mismatched or expired record is reported as
    None. Unreadable and mismatched records are deleted when read. Write errors
    propagate to the caller.
    """

    def __init__(
        self,
        repo: KeyValueRepository,
        prefix: str = DURABLE_CACHE_PREFIX,
        schema_version: int = CACHE_SCHEMA_VERSION,
        clock: Callable[[], float] = time.time,
    ):
        self._repo = repo
        self._prefix = prefix
        self._schema_version = schema_version
        self._clock = clock

    @property
    def prefix(self) -> str:
        return self._prefix

    def _physical(self, key: CacheKey | str) -> str:
        if isinstance(key, str):
            key = CacheKey.parse(key)
        return key.physical(self._prefix)

    async def store(self, key: CacheKey | str, data: Any) -> None:
        """Write `data` under `key`, replacing any previous record."""
        record = CacheRecord(timestamp=self._clock(), data=data, schema_version=self._schema_version)
        self._repo.set(self._physical(key), record.model_dump_json(by_alias=True))
        logger.debug("Cache stored: {}", key)

    async def retrieve(self, key: CacheKey | str, max_age: float = CACHE_TTL) -> Any | None:
        """Cached data no older than `max_age` seconds; pass math.inf to accept any age."""
        physical = self._physical(key)
        raw = self._repo.get(physical)
        if raw is None:
            logger.debug("Cache miss: {}", key)
            return None

        try:
            record = CacheRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Corrupt cache record {}, purging: {}", key, e.errors()[0]["msg"])
            self._repo.remove(physical)
            return None

        if record.schema_version != self._schema_version:
            logger.info("Cache schema mismatch for {} ({} != {}), purging", key, record.schema_version, self._schema_version)
            self._repo.remove(physical)
            return None

        age = self._clock() - record.timestamp
        if age > max_age:
            logger.debug("Cache expired: {} (age {:.0f}s)", key, age)
            return None

        logger.debug("Cache hit: {}", key)
        return record.data

    async def clear(self, key: CacheKey | str) -> None:
        self._repo.remove(self._physical(key))
        logger.debug("Cache cleared: {}", key)

    async def clear_all(self) -> None:
        """Remove every record under this store's prefix."""
        keys = self._repo.list_keys(self._prefix)
        for physical in keys:
            self._repo.remove(physical)
        logger.info("Cleared {} records under {}", len(keys), self._prefix)
