"""Base HTTP client with retry logic."""

import asyncio

import httpx
from loguru import logger
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from linkie_client.errors import NetworkFailure

# Default settings
API_BASE_URL = "https://linkieapi.shedaniel.me"
API_TIMEOUT = 60


def set_api_config(base_url: str, timeout: int) -> None:
    """Set API configuration."""
    global API_BASE_URL, API_TIMEOUT
    API_BASE_URL = base_url
    API_TIMEOUT = timeout


def _is_retryable_error(exc: BaseException) -> bool:
    """Check if exception is retryable (network errors + 5xx server errors)."""
    if isinstance(exc, (httpx.ReadError, httpx.ConnectError, httpx.TimeoutException)):
        return True
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500


def _to_network_failure(exc: httpx.HTTPError) -> NetworkFailure:
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return NetworkFailure(f"Request failed with status code {status}", status_code=status)
    return NetworkFailure(str(exc) or exc.__class__.__name__, transport=isinstance(exc, httpx.TransportError))


class BaseClient:
    """Base async HTTP client with rate limiting and exponential backoff."""

    def __init__(
        self,
        max_concurrent: int = 20,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client: httpx.AsyncClient | None = None
        self._sem = asyncio.Semaphore(max_concurrent)
        self._request_count = 0
        self._base_url = base_url
        self._transport = transport
        logger.info("{}: max_concurrent={}", self.__class__.__name__, max_concurrent)

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self._base_url or API_BASE_URL,
            timeout=API_TIMEOUT,
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *_):
        logger.info("Total API requests: {}", self._request_count)
        if self._client:
            await self._client.aclose()

    @property
    def request_count(self) -> int:
        return self._request_count

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        retry=retry_if_exception(_is_retryable_error),
        reraise=True,
    )
    async def _fetch(self, path: str, params: dict | None = None):
        """GET request with retry logic."""
        async with self._sem:
            self._request_count += 1
            resp = await self._client.get(path, params=params)
            resp.raise_for_status()
            return resp.json()

    async def _get(self, path: str, params: dict | None = None):
        """GET request; any HTTP failure surfaces as NetworkFailure."""
        if self._client is None:
            raise RuntimeError(f"{self.__class__.__name__} must be used as an async context manager")
        try:
            return await self._fetch(path, params)
        except httpx.HTTPError as e:
            logger.debug("GET {} failed: {!r}", path, e)
            raise _to_network_failure(e) from e
        except ValueError as e:
            raise NetworkFailure(f"Invalid JSON from {path}") from e
