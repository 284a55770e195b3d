"""Dependency Injection container - initialized at app startup."""

import duckdb

from app.repositories.common import KeyValueRepository
from app.services.cache import CacheService, OfflineCache
from app.services.mappings import Connectivity, MappingsBackend, MappingsSource, SearchSlot


class Container:
    """Application DI container - holds all singleton instances."""

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def init(self, conn: duckdb.DuckDBPyConnection | None = None, online: bool = True) -> None:
        """Initialize all dependencies. Call once at app startup."""
        if self._initialized:
            return

        # Repositories (singletons)
        self._kv_repo = KeyValueRepository(conn)

        # Services (with injected repos)
        self.durable_cache = CacheService(self._kv_repo)
        self.offline_cache = OfflineCache(self._kv_repo)
        self.connectivity = Connectivity(online)

        self._initialized = True

    def backend(self, client: MappingsSource) -> MappingsBackend:
        """Orchestrator bound to an open client."""
        return MappingsBackend(
            client=client,
            durable=self.durable_cache,
            offline=self.offline_cache,
            connectivity=self.connectivity,
        )

    def search_slot(self, client: MappingsSource) -> SearchSlot:
        return SearchSlot(self.backend(client))


# Global container instance
container = Container()
