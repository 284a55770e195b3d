"""Abort handles for in-flight requests."""

import asyncio
import contextlib
from collections.abc import Awaitable
from typing import TypeVar

from linkie_client.errors import Cancelled

T = TypeVar("T")


class CancelToken:
    """One-shot abort handle, shared between the caller and the request."""

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        """Abort the request this token guards."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise Cancelled()

    async def run(self, aw: Awaitable[T]) -> T:
        """Await `aw` unless the token fires first, then raise Cancelled."""
        if self.cancelled:
            if asyncio.iscoroutine(aw):
                aw.close()
            raise Cancelled()

        request = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({request, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            request.cancel()
            raise
        finally:
            waiter.cancel()

        if self.cancelled:
            if not request.done():
                request.cancel()
            with contextlib.suppress(Exception, asyncio.CancelledError):
                await request
            raise Cancelled()

        return request.result()
