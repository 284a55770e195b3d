"""Search slot - at most one active search per slot."""

from loguru import logger

from app.services.mappings.backend import MappingsBackend
from linkie_client.cancel import CancelToken
from linkie_client.schemas import MappingSearchIndex, SearchParams


class SearchSlot:
    """A search box: starting a search aborts the one still in flight."""

    def __init__(self, backend: MappingsBackend):
        self._backend = backend
        self._token: CancelToken | None = None

    @property
    def busy(self) -> bool:
        return self._token is not None

    def cancel(self) -> None:
        """Abort the in-flight search, if any. It resolves to an empty result."""
        if self._token is not None:
            logger.debug("Cancelling previous search")
            self._token.cancel()
            self._token = None

    async def search(self, params: SearchParams) -> MappingSearchIndex:
        self.cancel()
        token = CancelToken()
        self._token = token
        try:
            return await self._backend.search(params, token=token)
        finally:
            if self._token is token:
                self._token = None
