"""
Redis Cache Module

Short-lived response cache for read endpoints:
- Connection pooling
- JSON serialization
- TTL per namespace

The cache is optional. When Redis is disabled, not initialized, or failing,
every read is a miss and every write is dropped.
"""

import json
from typing import Any, Awaitable, Callable, Optional

import structlog
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from storefront.config import get_settings

logger = structlog.get_logger(__name__)

# Global Redis connection
_redis_pool: Optional[ConnectionPool] = None
_redis_client: Optional[Redis] = None


async def init_redis() -> Optional[Redis]:
    """Initialize Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client is not None:
        return _redis_client

    settings = get_settings()
    if not settings.redis.enabled:
        logger.info("Redis cache disabled")
        return None

    _redis_pool = ConnectionPool.from_url(
        settings.redis.get_url(),
        max_connections=settings.redis.max_connections,
        socket_timeout=settings.redis.socket_timeout,
        decode_responses=True,
    )
    client = Redis(connection_pool=_redis_pool)

    try:
        await client.ping()
        logger.info("Redis connection established")
    except (RedisError, OSError) as e:
        logger.error("Redis connection failed", error=str(e))
        await _redis_pool.disconnect()
        _redis_pool = None
        raise

    _redis_client = client
    return _redis_client


async def close_redis() -> None:
    """Close Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None

    if _redis_pool:
        await _redis_pool.disconnect()
        _redis_pool = None

    logger.info("Redis connection closed")


def get_redis() -> Optional[Redis]:
    """Get Redis client instance, or None when the cache is off"""
    return _redis_client


def cache_key(endpoint: str, **params: Any) -> str:
    """Stable key for an endpoint and its parameters."""
    parts = [endpoint]
    for name in sorted(params):
        value = params[name]
        parts.append(f"{name}={'' if value is None else value}")
    return ":".join(parts)


async def cache_get(key: str) -> Optional[Any]:
    """
    Get value from cache.

    Args:
        key: Cache key

    Returns:
        Cached value or None if not found or the cache is unavailable
    """
    client = get_redis()
    if client is None:
        return None

    try:
        value = await client.get(key)
    except (RedisError, OSError) as e:
        logger.warning("Cache read failed", key=key, error=str(e))
        return None

    if value is None:
        return None

    try:
        return json.loads(value)
    except json.JSONDecodeError:
        logger.warning("Discarding undecodable cache entry", key=key)
        return None


async def cache_set(key: str, value: Any, ttl: int) -> bool:
    """
    Set value in cache.

    Args:
        key: Cache key
        value: JSON-serializable value
        ttl: Time-to-live in seconds

    Returns:
        True if stored
    """
    client = get_redis()
    if client is None:
        return False

    try:
        serialized = json.dumps(value, default=str)
    except (TypeError, ValueError) as e:
        logger.warning("Failed to serialize value for cache", key=key, error=str(e))
        return False

    try:
        await client.setex(key, ttl, serialized)
    except (RedisError, OSError) as e:
        logger.warning("Cache write failed", key=key, error=str(e))
        return False
    return True


class CacheManager:
    """
    Cache manager with namespace support.

    Example:
        cache = CacheManager("products", default_ttl=120)
        await cache.set("top:limit=10", payload)
        payload = await cache.get("top:limit=10")
    """

    def __init__(self, namespace: str, default_ttl: int = 60):
        self.namespace = namespace
        self.default_ttl = default_ttl

    def _key(self, key: str) -> str:
        """Generate namespaced key"""
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        return await cache_get(self._key(key))

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value in cache"""
        return await cache_set(self._key(key), value, ttl or self.default_ttl)

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        ttl: Optional[int] = None,
    ) -> Any:
        """
        Get from cache or compute and cache.

        Args:
            key: Cache key
            factory: Async function to compute value if not cached
            ttl: Time-to-live

        Returns:
            Cached or computed value
        """
        value = await self.get(key)
        if value is not None:
            return value

        value = await factory()
        await self.set(key, value, ttl)
        return value


_catalog = get_settings().catalog

# Pre-configured cache managers
products_cache = CacheManager("products", default_ttl=_catalog.products_cache_ttl)
promotions_cache = CacheManager("promotions", default_ttl=_catalog.promotions_cache_ttl)
reference_cache = CacheManager("reference", default_ttl=_catalog.categories_cache_ttl)
