"""Mappings services - connectivity, request orchestration, search slots."""

from app.services.mappings.backend import ALL_NAMESPACES, VERSIONS_KEY, MappingsBackend, MappingsSource
from app.services.mappings.connectivity import Connectivity
from app.services.mappings.slot import SearchSlot
from app.services.mappings.state import RequestKind, RequestState, RequestTracker

__all__ = [
    "MappingsBackend",
    "MappingsSource",
    "SearchSlot",
    "Connectivity",
    "RequestKind",
    "RequestState",
    "RequestTracker",
    "VERSIONS_KEY",
    "ALL_NAMESPACES",
]
