"""Cache layer for Lawrose.

Provides Redis caching for the catalog, cart and auth services:
- Namespaced keys ({prefix}{type}:{identifier}[:{sub_key}])
- TTLs per data category with override and default fallback
- Pipelined bulk operations and SCAN-based pattern invalidation
- Cache-aside reads that degrade to the source of truth on any failure
"""

from lawrose.cache.aside import CacheAsideOrchestrator
from lawrose.cache.bulk import BulkOps
from lawrose.cache.keys import KeyCodec
from lawrose.cache.redis import (
    close_redis,
    create_redis,
    get_redis,
    is_healthy,
    verify_connection,
)
from lawrose.cache.scanner import PatternScanner
from lawrose.cache.service import CacheService, get_cache_service, reset_cache_service
from lawrose.cache.stats import StatsCollector
from lawrose.cache.store import CacheStore
from lawrose.cache.ttl import TTLPolicy
from lawrose.cache.types import (
    BulkCacheItem,
    CacheKey,
    CacheKeyType,
    CacheSearchResult,
    CacheSetOptions,
    CacheStats,
)

__all__ = [
    # Facade
    "CacheService",
    "get_cache_service",
    "reset_cache_service",
    # Components
    "BulkOps",
    "CacheAsideOrchestrator",
    "CacheStore",
    "KeyCodec",
    "PatternScanner",
    "StatsCollector",
    "TTLPolicy",
    # Types
    "BulkCacheItem",
    "CacheKey",
    "CacheKeyType",
    "CacheSearchResult",
    "CacheSetOptions",
    "CacheStats",
    # Client lifecycle
    "close_redis",
    "create_redis",
    "get_redis",
    "is_healthy",
    "verify_connection",
]
