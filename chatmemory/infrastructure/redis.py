"""Async Redis cache for persona descriptions."""

import logging
from typing import Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class AsyncRedisPersonaCache:
    """Cache-aside store for persona descriptions.

    PostgreSQL stays the source of truth; every Redis failure is logged and
    reported as a miss so callers fall back to the durable store.
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None) -> None:
        """Initialize cache (connection created via connect() unless a client is given)."""
        self.redis_client: Optional[redis.Redis] = redis_client
        self.redis_ttl: int = 1800

    async def connect(
        self,
        redis_host: str,
        redis_password: str,
        redis_port: int = 6380,
        redis_ssl: bool = True,
        redis_ttl: int = 1800,
    ) -> None:
        """Create async Redis connection.

        Args:
            redis_host: Redis server hostname
            redis_password: Redis password/access key
            redis_port: Redis port (default: 6380 for Azure SSL)
            redis_ssl: Enable SSL/TLS connection
            redis_ttl: TTL for cached personas in seconds
        """
        self.redis_ttl = redis_ttl

        try:
            self.redis_client = redis.Redis(
                host=redis_host,
                port=redis_port,
                password=redis_password,
                ssl=redis_ssl,
                ssl_cert_reqs="required" if redis_ssl else None,
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
                max_connections=10,
            )
            await self.redis_client.ping()
            logger.info(f"Redis connection successful: {redis_host}:{redis_port}")
        except redis.RedisError as e:
            logger.error(f"Redis connection failed: {e}")
            self.redis_client = None
            raise RuntimeError(f"Failed to connect to Redis: {e}")

    async def close(self) -> None:
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
            logger.info("Redis connection closed")

    def is_available(self) -> bool:
        """Check if Redis is available."""
        return self.redis_client is not None

    @staticmethod
    def _key(user_id: str) -> str:
        return f"persona:{user_id}"

    async def get_description(self, user_id: str) -> Optional[str]:
        """Get a cached persona description. Returns None on miss or error."""
        if not self.redis_client:
            return None

        try:
            description = await self.redis_client.get(self._key(user_id))
            if description is not None:
                logger.debug(f"Redis cache hit for persona of user {user_id}")
            return description
        except redis.RedisError as e:
            logger.warning(f"Redis error in get_description: {e}")
            return None

    async def set_description(self, user_id: str, description: str) -> bool:
        """Cache a persona description with the configured TTL.

        Returns:
            True if successful, False otherwise
        """
        if not self.redis_client:
            return False

        try:
            await self.redis_client.set(self._key(user_id), description, ex=self.redis_ttl)
            return True
        except redis.RedisError as e:
            logger.warning(f"Redis error in set_description: {e}")
            return False

    async def invalidate(self, user_id: str) -> None:
        """Drop the cached persona for a user."""
        if not self.redis_client:
            return

        try:
            await self.redis_client.delete(self._key(user_id))
        except redis.RedisError as e:
            logger.warning(f"Redis error in invalidate: {e}")
