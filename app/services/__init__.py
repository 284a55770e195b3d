"""Services package - service class exports."""

from app.services.cache import CacheService, OfflineCache
from app.services.mappings import Connectivity, MappingsBackend, SearchSlot

__all__ = [
    "CacheService",
    "OfflineCache",
    "Connectivity",
    "MappingsBackend",
    "SearchSlot",
]
