"""
Optional Redis cache for statistics aggregates.

When ENABLE_REDIS_CACHE is off, or Redis cannot be reached, every call is a
cheap no-op and callers fall back to the database.
"""

import json
import logging
from typing import Any, Optional

import redis

from community_api.config import ENABLE_REDIS_CACHE, REDIS_URL

logger = logging.getLogger(__name__)


class RedisCache:
    """Thin wrapper around a Redis client that degrades gracefully."""

    def __init__(self, url: str = REDIS_URL, enabled: bool = ENABLE_REDIS_CACHE):
        self._enabled = enabled
        self._client: Optional[redis.Redis] = None
        if enabled:
            try:
                self._client = redis.Redis.from_url(url, decode_responses=True, socket_timeout=2)
            except redis.RedisError as e:
                logger.warning("Redis cache disabled: %s", e)
                self._client = None

    @property
    def is_available(self) -> bool:
        return self._enabled and self._client is not None

    def ping(self) -> bool:
        if not self.is_available:
            return False
        return bool(self._client.ping())

    def get(self, key: str) -> Optional[str]:
        if not self.is_available:
            return None
        try:
            return self._client.get(key)
        except redis.RedisError as e:
            logger.warning("Redis GET %s failed: %s", key, e)
            return None

    def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        if not self.is_available:
            return False
        try:
            return bool(self._client.set(key, value, ex=ttl_seconds))
        except redis.RedisError as e:
            logger.warning("Redis SET %s failed: %s", key, e)
            return False

    def delete(self, key: str) -> bool:
        if not self.is_available:
            return False
        try:
            return self._client.delete(key) > 0
        except redis.RedisError as e:
            logger.warning("Redis DELETE %s failed: %s", key, e)
            return False

    def get_json(self, key: str) -> Optional[Any]:
        raw = self.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set_json(self, key: str, value: Any, ttl_seconds: int) -> bool:
        return self.set(key, json.dumps(value, default=str), ttl_seconds)


redis_client = RedisCache()
