"""
Redis client with connection pooling.

Provides a Redis-backed cache provider with:
- Connection pooling (configurable max connections)
- JSON serialization for cached responses
- Graceful degradation when Redis is unavailable at start-up
"""

import json
import threading
from typing import Any, Optional

import redis
from redis.exceptions import RedisError

from core.config import Settings, get_settings
from core.exceptions import CacheError
from core.logging import get_logger

logger = get_logger("cache")


class RedisCache:
    """
    Redis cache client with connection pooling.

    Features:
    - Lazy, thread-safe initialization of the connection pool
    - JSON helpers on top of raw string get/set
    - Reads miss and writes no-op when Redis was unreachable at start-up
    - Faults during an operation raise CacheError

    Usage:
        cache = RedisCache(settings)
        cache.initialize()

        cache.set_json("likers:u1:", {"likers": []}, ttl=30)
        data = cache.get_json("likers:u1:")
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings
        self._pool: Optional[redis.ConnectionPool] = None
        self._initialized = False
        self._available = False
        self._lock = threading.Lock()

    def initialize(self, force: bool = False) -> bool:
        """
        Initialize Redis connection pool.

        Args:
            force: Force re-initialization even if already initialized

        Returns:
            True if Redis is available and connected, False otherwise
        """
        with self._lock:
            if self._initialized and not force:
                return self._available

            settings = self._settings or get_settings()
            try:
                self._pool = redis.ConnectionPool(
                    host=settings.redis_host,
                    port=settings.redis_port,
                    db=settings.redis_db,
                    password=settings.redis_password,
                    max_connections=settings.redis_max_connections,
                    socket_timeout=settings.redis_socket_timeout,
                    socket_connect_timeout=settings.redis_socket_timeout,
                    decode_responses=True,
                )

                # Test connection
                redis.Redis(connection_pool=self._pool).ping()

                self._available = True
                logger.info("redis_connected", host=settings.redis_host, port=settings.redis_port)
            except RedisError as e:
                logger.warning("redis_connection_failed", error=str(e))
                self._available = False
            finally:
                self._initialized = True

            return self._available

    @property
    def client(self) -> Optional[redis.Redis]:
        """Get Redis client from pool."""
        if not self._initialized:
            self.initialize()

        if not self._available or self._pool is None:
            return None

        return redis.Redis(connection_pool=self._pool)

    @property
    def is_available(self) -> bool:
        """Check if Redis is available."""
        if not self._initialized:
            self.initialize()
        return self._available

    # =========================================================================
    # String Operations
    # =========================================================================

    def get(self, key: str) -> Optional[str]:
        """
        Get a raw value.

        Returns:
            The stored string, or None if missing or Redis is unavailable

        Raises:
            CacheError: On a transport fault
        """
        client = self.client
        if client is None:
            return None

        try:
            return client.get(key)
        except RedisError as e:
            raise CacheError(f"cache get failed for {key}") from e

    def set(self, key: str, value: str, ttl: int) -> bool:
        """
        Store a raw value with a TTL in seconds.

        Returns:
            True if stored, False if Redis is unavailable

        Raises:
            CacheError: On a transport fault
        """
        client = self.client
        if client is None:
            return False

        try:
            client.setex(key, ttl, value)
            return True
        except RedisError as e:
            raise CacheError(f"cache set failed for {key}") from e

    def delete(self, *keys: str) -> int:
        """Delete keys. Returns the number of keys removed."""
        client = self.client
        if client is None or not keys:
            return 0

        try:
            return int(client.delete(*keys))
        except RedisError as e:
            raise CacheError("cache delete failed") from e

    # =========================================================================
    # JSON Operations
    # =========================================================================

    def get_json(self, key: str) -> Optional[dict[str, Any]]:
        """
        Get JSON object data from cache.

        Returns:
            Parsed object, or None if missing

        Raises:
            CacheError: On a transport fault or a payload that is not a JSON object
        """
        raw = self.get(key)
        if raw is None:
            return None

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CacheError(f"cached value for {key} is not valid JSON") from e
        if not isinstance(parsed, dict):
            raise CacheError(f"cached value for {key} is not a JSON object")
        return parsed

    def set_json(self, key: str, value: dict[str, Any], ttl: int) -> bool:
        """Store JSON-serializable data in cache."""
        try:
            serialized = json.dumps(value)
        except TypeError as e:
            raise CacheError(f"value for {key} is not JSON serializable") from e
        return self.set(key, serialized, ttl)

    # =========================================================================
    # Health Check
    # =========================================================================

    def health_check(self) -> dict[str, Any]:
        """
        Get cache health status.

        Returns:
            Dictionary with health information
        """
        status: dict[str, Any] = {
            "available": self._available,
            "initialized": self._initialized,
        }

        client = self.client
        if client is None:
            status["status"] = "unavailable"
            return status

        try:
            client.ping()
            status["status"] = "healthy"
        except RedisError:
            status["status"] = "degraded"

        return status

    def close(self) -> None:
        """Disconnect all pooled connections."""
        with self._lock:
            if self._pool is not None:
                self._pool.disconnect()
            self._pool = None
            self._initialized = False
            self._available = False
