"""
Redis Caching Layer.

Provides Redis-based caching with connection pooling for paginated liker
lists and liker counts.

Usage:
    from core.cache import RedisCache, CacheKeys

    cache = RedisCache()
    cache.set_json(CacheKeys.likers_count("user123"), {"count": 3}, ttl=CacheKeys.TTL_LIKERS_COUNT)
    data = cache.get_json(CacheKeys.likers_count("user123"))
"""

from core.cache.base import CacheProvider
from core.cache.cache_keys import CacheKeys
from core.cache.redis_client import RedisCache

__all__ = [
    "CacheProvider",
    "CacheKeys",
    "RedisCache",
]
