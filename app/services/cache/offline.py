"""Structured offline cache - per-category records and merged search indices."""

import math
import re
import time
from collections.abc import Callable
from typing import Any

from loguru import logger
from pydantic import ValidationError

from app.repositories.common import KeyValueRepository
from app.services.cache.durable import CacheService
from app.services.cache.keys import CacheKey
from linkie_client.schemas import MappingSearchIndex, NamedEntry
from settings import CACHE_SCHEMA_VERSION, OFFLINE_CACHE_PREFIX

NAMESPACES = "namespaces"
VERSIONS = "versions"
MAPPING = "mapping"


def _is_list(data: Any) -> bool:
    return isinstance(data, list)


def _is_versions(data: Any) -> bool:
    return isinstance(data, dict) and all(isinstance(v, list) for v in data.values())


def _is_search_index(data: Any) -> bool:
    try:
        MappingSearchIndex.model_validate(data)
    except ValidationError:
        return False
    return True


VALIDATORS: dict[str, Callable[[Any], bool]] = {
    NAMESPACES: _is_list,
    VERSIONS: _is_versions,
    MAPPING: _is_search_index,
}


def _merge_by_name(existing: list[NamedEntry], incoming: list[NamedEntry]) -> list[NamedEntry]:
    """Dedup by name: a later entry replaces an earlier one's content in the earlier slot."""
    merged: dict[str, NamedEntry] = {}
    for entry in [*existing, *incoming]:
        merged[entry.name] = entry
    return list(merged.values())


def _compile_query(query: str) -> re.Pattern:
    try:
        return re.compile(query, re.IGNORECASE)
    except re.error:
        return re.compile(re.escape(query), re.IGNORECASE)


def _filter(entries: list[NamedEntry], pattern: re.Pattern) -> list[NamedEntry]:
    return [e for e in entries if pattern.search(e.name) or pattern.search(e.mapped or "")]


class OfflineCache:
    """Cache for data needed while offline.

    Records never expire by age; only a schema version bump invalidates them.
    Data failing its category's shape check is neither written nor returned.
    """

    def __init__(
        self,
        repo: KeyValueRepository,
        prefix: str = OFFLINE_CACHE_PREFIX,
        schema_version: int = CACHE_SCHEMA_VERSION,
        clock: Callable[[], float] = time.time,
    ):
        self._store = CacheService(repo, prefix=prefix, schema_version=schema_version, clock=clock)

    @staticmethod
    def _is_valid(category: str, data: Any) -> bool:
        validator = VALIDATORS.get(category)
        return validator is None or validator(data)

    async def _write(self, key: CacheKey, data: Any) -> None:
        if not self._is_valid(key.category, data):
            logger.warning("[Cache] Invalid {} data, not caching {}", key.category, key)
            return
        await self._store.store(key, data)
        logger.debug("[Cache] Stored {}", key)

    async def _read(self, key: CacheKey) -> Any | None:
        data = await self._store.retrieve(key, max_age=math.inf)
        if data is None:
            return None
        if not self._is_valid(key.category, data):
            logger.warning("[Cache] Invalid {} data in cache for {}", key.category, key)
            return None
        return data

    async def set(self, category: str, subkey: str, data: Any) -> None:
        """Validate and persist; invalid shapes are skipped with a warning."""
        await self._write(CacheKey.of(category, subkey), data)

    async def get(self, category: str, subkey: str) -> Any | None:
        return await self._read(CacheKey.of(category, subkey))

    async def clear(self, category: str, *parts: str) -> None:
        await self._store.clear(CacheKey.of(category, *parts))

    async def clear_all(self) -> None:
        await self._store.clear_all()

    # ========== Search indices ==========

    async def get_search_index(self, namespace: str, version: str) -> MappingSearchIndex | None:
        data = await self._read(CacheKey.of(MAPPING, namespace, version))
        if data is None:
            return None
        return MappingSearchIndex.model_validate(data)

    async def store_search_index(self, namespace: str, version: str, index: MappingSearchIndex) -> None:
        """Replace the index for a namespace/version with `index` as-is."""
        stored = MappingSearchIndex(classes=index.classes, methods=index.methods, fields=index.fields)
        await self._write(CacheKey.of(MAPPING, namespace, version), stored.model_dump())

    async def merge_search_index(
        self,
        namespace: str,
        version: str,
        incoming: MappingSearchIndex,
    ) -> MappingSearchIndex:
        """Merge search results into the cached index for a namespace/version.

        Each collection is deduplicated by name over existing + incoming. An
        incoming entry replaces a cached one with the same name but keeps the
        cached entry's position; new names are appended. Not atomic: concurrent
        merges for the same key may lose one caller's update.
        """
        existing = await self.get_search_index(namespace, version) or MappingSearchIndex()
        merged = MappingSearchIndex(
            classes=_merge_by_name(existing.classes, incoming.classes),
            methods=_merge_by_name(existing.methods, incoming.methods),
            fields=_merge_by_name(existing.fields, incoming.fields),
        )
        await self.store_search_index(namespace, version, merged)
        logger.debug(
            "[Cache] Merged index {}:{} ({} classes, {} methods, {} fields)",
            namespace,
            version,
            len(merged.classes),
            len(merged.methods),
            len(merged.fields),
        )
        return merged

    async def search_offline(
        self,
        namespace: str,
        version: str,
        query: str,
        allow_classes: bool,
        allow_fields: bool,
        allow_methods: bool,
    ) -> MappingSearchIndex:
        """Answer a search from the cached index, shaped like a live result."""
        query = query or ""
        result = MappingSearchIndex.empty(query)
        cached = await self.get_search_index(namespace, version)
        if cached is None:
            logger.debug("[Cache] No index for {}:{}", namespace, version)
            return result

        pattern = _compile_query(query)
        if allow_classes:
            result.classes = _filter(cached.classes, pattern)
        if allow_methods:
            result.methods = _filter(cached.methods, pattern)
        if allow_fields:
            result.fields = _filter(cached.fields, pattern)
        return result
