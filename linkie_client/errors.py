"""Tagged error taxonomy shared by the client and the cache layer."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Closed set of failure kinds."""

    NETWORK = "network"
    CANCELLED = "cancelled"
    STORAGE = "storage"


class LinkieError(Exception):
    """Base error. Subclasses are told apart by `kind`."""

    kind: ErrorKind

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class NetworkFailure(LinkieError):
    """Transport or server error from the remote API."""

    kind = ErrorKind.NETWORK

    def __init__(self, message: str = "Network request failed", status_code: int | None = None, transport: bool = False):
        self.status_code = status_code
        # True when the server was never reached (connect/read/timeout)
        self.transport = transport
        super().__init__(message)


class Cancelled(LinkieError):
    """Request superseded or explicitly aborted."""

    kind = ErrorKind.CANCELLED

    def __init__(self, message: str = "Request cancelled"):
        super().__init__(message)


class StorageFailure(LinkieError):
    """Write to the persistent medium failed."""

    kind = ErrorKind.STORAGE

    def __init__(self, message: str = "Storage write failed"):
        super().__init__(message)
