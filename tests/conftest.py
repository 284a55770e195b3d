"""Shared fixtures: in-memory medium, controllable clock, fake remote source."""

import asyncio

import duckdb
import pytest

from app.repositories import KeyValueRepository, init_tables
from app.services.cache import CacheService, OfflineCache
from app.services.mappings import Connectivity, MappingsBackend
from linkie_client.cancel import CancelToken
from linkie_client.errors import NetworkFailure


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSource:
    """Remote source double. Set `error` to make every call fail.

    `delay` is seconds per call, or a function of the search query.
    """

    def __init__(self, versions=None, namespaces=None, search=None, error: Exception | None = None, delay=0):
        self.versions_data = versions
        self.namespaces_data = namespaces
        self.search_data = search
        self.error = error
        self.delay = delay
        self.calls: list[tuple] = []

    def _delay(self, query: str | None) -> float:
        return self.delay(query) if callable(self.delay) else self.delay

    async def _respond(self, data, delay: float = 0):
        await asyncio.sleep(delay)
        if self.error:
            raise self.error
        return data

    async def versions(self):
        self.calls.append(("versions",))
        return await self._respond(self.versions_data, self._delay(None))

    async def namespaces(self):
        self.calls.append(("namespaces",))
        return await self._respond(self.namespaces_data, self._delay(None))

    async def search(self, namespace, version, query, token: CancelToken | None = None, **kwargs):
        self.calls.append(("search", namespace, version, query, kwargs))
        data = self.search_data(query) if callable(self.search_data) else self.search_data
        if token is None:
            return await self._respond(data, self._delay(query))
        return await token.run(self._respond(data, self._delay(query)))


@pytest.fixture
def conn():
    conn = duckdb.connect(":memory:")
    init_tables(conn)
    yield conn
    conn.close()


@pytest.fixture
def repo(conn) -> KeyValueRepository:
    return KeyValueRepository(conn)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def durable(repo, clock) -> CacheService:
    return CacheService(repo, clock=clock)


@pytest.fixture
def offline(repo, clock) -> OfflineCache:
    return OfflineCache(repo, clock=clock)


@pytest.fixture
def connectivity() -> Connectivity:
    return Connectivity(online=True)


@pytest.fixture
def network_down() -> NetworkFailure:
    return NetworkFailure("Network Error", transport=True)


@pytest.fixture
def make_backend(durable, offline, connectivity):
    def make(source: FakeSource) -> MappingsBackend:
        return MappingsBackend(client=source, durable=durable, offline=offline, connectivity=connectivity)

    return make


@pytest.fixture
def make_source():
    return FakeSource
