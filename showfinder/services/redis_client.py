# showfinder/services/redis_client.py
import json
from typing import Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from showfinder.config import settings
from showfinder.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class FastRedisClient:
    """Pooled Redis client backing the approval notification queue"""

    def __init__(self):
        self.pool = None
        self.client = None
        self._initialized = False

    async def initialize(self):
        """Initialize connection pool on startup"""
        if self._initialized:
            return

        try:
            logger.info("Attempting Redis connection", url_preview=settings.REDIS_URL[:30] + "...")

            self.pool = ConnectionPool.from_url(
                settings.REDIS_URL,
                max_connections=20,
                retry_on_timeout=True,
                retry_on_error=[redis.ConnectionError, redis.TimeoutError],
                socket_connect_timeout=10,
                socket_timeout=10,
                health_check_interval=30,
                decode_responses=True,
            )

            self.client = redis.Redis(connection_pool=self.pool)

            # Test connection
            result = await self.client.ping()
            logger.info("Redis ping successful", result=result)

            self._initialized = True
            logger.info("Fast Redis client initialized successfully", max_connections=20)

        except Exception as e:
            logger.error("Failed to initialize fast Redis client", error=str(e))
            self._initialized = False
            raise RuntimeError("Redis initialization failed") from e

    async def close(self):
        """Clean shutdown"""
        try:
            if self.client:
                await self.client.aclose()
            if self.pool:
                await self.pool.disconnect()
            self._initialized = False
            logger.info("Fast Redis client closed")
        except Exception as e:
            logger.error("Error closing Redis client", error=str(e))

    async def _ensure_initialized(self):
        """Ensure Redis is initialized, fallback if not"""
        if not self._initialized:
            logger.warning("Redis not initialized, attempting to initialize")
            await self.initialize()
            if not self._initialized:
                raise ConnectionError("Redis client not available")

    async def ping(self) -> bool:
        """Test Redis connection"""
        try:
            await self._ensure_initialized()
            result = await self.client.ping()
            return bool(result)
        except Exception as e:
            logger.error("Redis ping failed", error=str(e))
            return False

    async def push_json(self, key: str, payload: dict[str, Any]) -> bool:
        """Append a JSON message to a list queue - with fallback handling"""
        try:
            await self._ensure_initialized()
            length = await self.client.rpush(key, json.dumps(payload, default=str))
            return length > 0
        except Exception as e:
            logger.error("Redis RPUSH failed", key=key[:30], error=str(e))
            return False

    async def queue_length(self, key: str) -> int | None:
        try:
            await self._ensure_initialized()
            return int(await self.client.llen(key))
        except Exception as e:
            logger.error("Redis LLEN failed", key=key[:30], error=str(e))
            return None


# Global instance
fast_redis = FastRedisClient()
