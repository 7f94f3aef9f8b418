"""Redis client used as the notification transport."""

import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis

from ..config import get_settings

logger = logging.getLogger(__name__)


def inbox_key(user_id: Any) -> str:
    """Key of a user's notification inbox list."""
    return f"notifications:{user_id}"


class RedisClient:
    """Thin async Redis wrapper for notification inboxes and live fan-out."""

    def __init__(self):
        self.settings = get_settings()
        self.redis: Optional[redis.Redis] = None

    @property
    def connected(self) -> bool:
        return self.redis is not None

    async def connect(self) -> None:
        """Connect to Redis."""
        try:
            self.redis = redis.from_url(
                self.settings.redis_url,
                max_connections=self.settings.redis_max_connections,
                decode_responses=True,
            )
            # Test connection
            await self.redis.ping()
            logger.info("Connected to Redis successfully")
        except Exception as e:
            self.redis = None
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            logger.info("Disconnected from Redis")

    async def ping(self) -> bool:
        if not self.redis:
            return False
        return bool(await self.redis.ping())

    async def push_notification(
        self, user_id: Any, payload: Dict[str, Any], max_len: Optional[int] = None
    ) -> bool:
        """Prepend a notification to a user's inbox and publish it for live listeners.

        Returns False when no connection is available. Redis errors propagate.
        """
        if not self.redis:
            return False

        key = inbox_key(user_id)
        max_len = max_len or self.settings.notification_inbox_size
        data = json.dumps(payload)

        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.lpush(key, data)
            pipe.ltrim(key, 0, max_len - 1)
            pipe.publish(self.settings.notification_channel, data)
            await pipe.execute()
        return True


# Global Redis client instance
_redis_client: Optional[RedisClient] = None


def get_redis_client() -> RedisClient:
    """Get global Redis client instance."""
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client
