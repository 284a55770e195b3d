"""Per-kind request state tracking."""

from enum import StrEnum

from loguru import logger


class RequestKind(StrEnum):
    VERSIONS = "versions"
    NAMESPACES = "namespaces"
    SEARCH = "search"
    WARM = "warm"


class RequestState(StrEnum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED_WITH_FALLBACK = "failed_with_fallback"
    FAILED_HARD = "failed_hard"
    CANCELLED = "cancelled"


class RequestTracker:
    """Last known state of each request kind."""

    def __init__(self):
        self._states = {kind: RequestState.IDLE for kind in RequestKind}

    def get(self, kind: RequestKind) -> RequestState:
        return self._states[kind]

    def set(self, kind: RequestKind, state: RequestState) -> None:
        self._states[kind] = state
        logger.debug("{} -> {}", kind, state)
