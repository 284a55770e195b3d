"""Mappings API client package."""

from linkie_client.base import BaseClient, set_api_config
from linkie_client.cancel import CancelToken
from linkie_client.client import LinkieClient
from linkie_client.errors import Cancelled, ErrorKind, LinkieError, NetworkFailure, StorageFailure
from linkie_client.schemas import (
    MappingEntry,
    MappingSearchIndex,
    MappingType,
    NamedEntry,
    Namespace,
    SearchParams,
    VersionEntry,
    VersionsPayload,
)

__all__ = [
    # Base
    "BaseClient",
    "set_api_config",
    "CancelToken",
    # Clients
    "LinkieClient",
    # Errors
    "ErrorKind",
    "LinkieError",
    "NetworkFailure",
    "Cancelled",
    "StorageFailure",
    # Schemas
    "VersionEntry",
    "VersionsPayload",
    "Namespace",
    "NamedEntry",
    "MappingSearchIndex",
    "SearchParams",
    "MappingType",
    "MappingEntry",
]
