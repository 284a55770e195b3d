"""Cache layers - durable TTL store and structured offline cache."""

from app.services.cache.durable import CacheService
from app.services.cache.keys import CacheKey, CacheRecord
from app.services.cache.offline import MAPPING, NAMESPACES, VERSIONS, OfflineCache

__all__ = [
    "CacheKey",
    "CacheRecord",
    "CacheService",
    "OfflineCache",
    "MAPPING",
    "NAMESPACES",
    "VERSIONS",
]
