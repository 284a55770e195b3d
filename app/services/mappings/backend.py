"""Network-with-fallback orchestration for versions, namespaces and search."""

import math
from collections.abc import Awaitable, Callable
from typing import Any, Literal, Protocol

from loguru import logger
from pydantic import ValidationError

from app.services.cache import NAMESPACES, CacheKey, CacheService, OfflineCache
from app.services.mappings.connectivity import Connectivity
from app.services.mappings.state import RequestKind, RequestState, RequestTracker
from linkie_client.cancel import CancelToken
from linkie_client.errors import Cancelled, NetworkFailure, StorageFailure
from linkie_client.schemas import MappingSearchIndex, Namespace, SearchParams
from settings import WARM_CACHE_LIMIT

VERSIONS_KEY = CacheKey.of("versions")
ALL_NAMESPACES = "all"


class MappingsSource(Protocol):
    """Remote data source, e.g. LinkieClient."""

    async def versions(self) -> Any: ...

    async def namespaces(self) -> Any: ...

    async def search(
        self,
        namespace: str,
        version: str,
        query: str,
        allow_classes: bool = True,
        allow_fields: bool = True,
        allow_methods: bool = True,
        translate_mode: str | None = None,
        translate_as: str | None = None,
        limit: int = 100,
        token: CancelToken | None = None,
    ) -> Any: ...


class MappingsBackend:
    """Cache-aware requests.

    Live data is preferred and persisted on success. When a live call fails, or
    the connectivity hint says offline, cached data is served instead, stale
    data included. The original error surfaces only when no cache can answer.
    """

    def __init__(
        self,
        client: MappingsSource,
        durable: CacheService,
        offline: OfflineCache,
        connectivity: Callable[[], bool] | None = None,
        tracker: RequestTracker | None = None,
    ):
        self._client = client
        self._durable = durable
        self._offline = offline
        self._connectivity = connectivity if connectivity is not None else Connectivity()
        self._tracker = tracker or RequestTracker()

    def state(self, kind: RequestKind) -> RequestState:
        return self._tracker.get(kind)

    def _online(self) -> bool:
        return self._connectivity()

    async def _persist(self, what: str, write: Awaitable[Any]) -> None:
        """Best-effort cache write after a successful fetch."""
        try:
            await write
        except StorageFailure as e:
            logger.warning("[API] Could not cache {}: {}", what, e.message)

    # ========== Versions ==========

    async def get_versions(self, max_age: float | None = None) -> Any:
        """Versions per loader. With `max_age`, a fresh enough cached copy skips the network."""
        kind = RequestKind.VERSIONS
        if max_age is not None:
            cached = await self._durable.retrieve(VERSIONS_KEY, max_age=max_age)
            if cached is not None:
                logger.debug("[API] Using cached versions data")
                self._tracker.set(kind, RequestState.SUCCEEDED)
                return cached

        if not self._online():
            cached = await self._durable.retrieve(VERSIONS_KEY, max_age=math.inf)
            if cached is not None:
                logger.info("[API] Offline, using cached versions data")
                self._tracker.set(kind, RequestState.FAILED_WITH_FALLBACK)
                return cached

        self._tracker.set(kind, RequestState.IN_FLIGHT)
        try:
            data = await self._client.versions()
        except NetworkFailure as e:
            logger.warning("[API] Error fetching versions, trying cache: {}", e.message)
            cached = await self._durable.retrieve(VERSIONS_KEY, max_age=math.inf)
            if cached is None:
                self._tracker.set(kind, RequestState.FAILED_HARD)
                raise
            logger.info("[API] Using cached versions data")
            self._tracker.set(kind, RequestState.FAILED_WITH_FALLBACK)
            return cached

        await self._persist("versions", self._durable.store(VERSIONS_KEY, data))
        self._tracker.set(kind, RequestState.SUCCEEDED)
        return data

    async def refresh_versions(self) -> Any:
        """Drop the cached versions and fetch them again."""
        logger.info("[API] Refreshing versions cache")
        await self._durable.clear(VERSIONS_KEY)
        return await self.get_versions()

    # ========== Namespaces ==========

    async def get_namespaces(self) -> Any:
        """All namespaces. Responses that are not a list are returned but not cached."""
        kind = RequestKind.NAMESPACES
        if not self._online():
            cached = await self._offline.get(NAMESPACES, ALL_NAMESPACES)
            if cached is not None:
                logger.info("[API] Offline, using cached namespaces data")
                self._tracker.set(kind, RequestState.FAILED_WITH_FALLBACK)
                return cached

        self._tracker.set(kind, RequestState.IN_FLIGHT)
        try:
            data = await self._client.namespaces()
        except NetworkFailure as e:
            logger.warning("[API] Error fetching namespaces: {}", e.message)
            cached = await self._offline.get(NAMESPACES, ALL_NAMESPACES)
            if cached is None:
                self._tracker.set(kind, RequestState.FAILED_HARD)
                raise
            logger.info("[API] Using cached namespaces data after error")
            self._tracker.set(kind, RequestState.FAILED_WITH_FALLBACK)
            return cached

        if isinstance(data, list):
            await self._persist("namespaces", self._offline.set(NAMESPACES, ALL_NAMESPACES, data))
        else:
            logger.warning("[API] Unexpected namespaces payload ({}), not caching", type(data).__name__)
        self._tracker.set(kind, RequestState.SUCCEEDED)
        return data

    # ========== Search ==========

    async def _search_offline(self, params: SearchParams) -> MappingSearchIndex:
        return await self._offline.search_offline(
            params.namespace,
            params.version,
            params.query,
            params.allow_classes,
            params.allow_fields,
            params.allow_methods,
        )

    async def search(self, params: SearchParams, token: CancelToken | None = None) -> MappingSearchIndex:
        """Mapping search; always returns a fully shaped result.

        A cancelled request yields an empty result and touches no cache.
        """
        kind = RequestKind.SEARCH
        query = params.query or ""
        if not self._online():
            logger.info("[API] Offline, searching cached mappings for {}:{}", params.namespace, params.version)
            result = await self._search_offline(params)
            self._tracker.set(kind, RequestState.FAILED_WITH_FALLBACK)
            return result

        self._tracker.set(kind, RequestState.IN_FLIGHT)
        try:
            data = await self._client.search(
                params.namespace,
                params.version,
                query,
                allow_classes=params.allow_classes,
                allow_fields=params.allow_fields,
                allow_methods=params.allow_methods,
                translate_mode=params.translate_mode,
                translate_as=params.translate_as,
                limit=params.limit,
                token=token,
            )
            if token is not None:
                token.raise_if_cancelled()
            try:
                result = MappingSearchIndex.normalize(data, query)
            except ValidationError as e:
                raise NetworkFailure(f"Malformed search response: {e.error_count()} errors") from e
        except Cancelled:
            logger.debug("[API] Search for {!r} cancelled", query)
            self._tracker.set(kind, RequestState.CANCELLED)
            return MappingSearchIndex.empty(query)
        except NetworkFailure as e:
            if token is not None and token.cancelled:
                logger.debug("[API] Search for {!r} cancelled while failing: {}", query, e.message)
                self._tracker.set(kind, RequestState.CANCELLED)
                return MappingSearchIndex.empty(query)
            if await self._offline.get_search_index(params.namespace, params.version) is None:
                self._tracker.set(kind, RequestState.FAILED_HARD)
                raise
            logger.warning("[API] Search failed ({}), answering from cache", e.message)
            result = await self._search_offline(params)
            self._tracker.set(kind, RequestState.FAILED_WITH_FALLBACK)
            return result

        await self._persist(
            f"search results for {params.namespace}:{params.version}",
            self._offline.merge_search_index(params.namespace, params.version, result),
        )
        self._tracker.set(kind, RequestState.SUCCEEDED)
        return result

    # ========== Cache management ==========

    async def warm_cache(self, namespace: str, version: str) -> bool:
        """Fetch every mapping of a namespace/version into the offline cache.

        Opportunistic: failures are logged, never raised.
        """
        kind = RequestKind.WARM
        self._tracker.set(kind, RequestState.IN_FLIGHT)
        try:
            logger.info("[API] Caching mapping data for {}:{}...", namespace, version)
            data = await self._client.search(
                namespace,
                version,
                "",
                allow_classes=True,
                allow_fields=True,
                allow_methods=True,
                translate_mode="ns",
                limit=WARM_CACHE_LIMIT,
            )
            index = MappingSearchIndex.normalize(data, "")
            await self._offline.store_search_index(namespace, version, index)
        except Exception as e:
            logger.error("[API] Failed to cache mapping data for {}:{}: {}", namespace, version, e)
            self._tracker.set(kind, RequestState.FAILED_HARD)
            return False

        logger.info(
            "[API] Cached {} classes, {} methods, {} fields for {}:{}",
            len(index.classes),
            len(index.methods),
            len(index.fields),
            namespace,
            version,
        )
        self._tracker.set(kind, RequestState.SUCCEEDED)
        return True

    async def warm_namespace(self, namespace_id: str, allow_snapshots: bool = False) -> str | None:
        """Warm the default version of a namespace; returns that version."""
        try:
            namespaces = [Namespace.model_validate(n) for n in await self.get_namespaces()]
        except Exception as e:
            logger.error("[API] Cannot resolve versions of {}: {}", namespace_id, e)
            return None

        namespace = next((n for n in namespaces if n.id == namespace_id), None)
        version = namespace.default_version(allow_snapshots) if namespace else None
        if version is None:
            logger.warning("[API] No {}version found for namespace {}", "" if allow_snapshots else "stable ", namespace_id)
            return None

        if await self.warm_cache(namespace_id, version):
            return version
        return None

    async def clear_cache(self, scope: Literal["all"] | CacheKey | str = "all") -> None:
        """Drop cached data: everything, or one key in both cache layers."""
        if scope == "all":
            await self._durable.clear_all()
            await self._offline.clear_all()
            return

        key = scope if isinstance(scope, CacheKey) else CacheKey.parse(scope)
        await self._durable.clear(key)
        await self._offline.clear(key.category, *key.parts)
