"""Key/value storage for per-user chat state — Redis when reachable, memory otherwise."""

import copy
import json
import logging
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from flight_agent.config import settings

logger = logging.getLogger(__name__)


class MemoryStore:
    """In-process store. Values are deep-copied so callers never share state."""

    def __init__(self):
        self._data: dict[str, Any] = {}

    async def get(self, key: str) -> Any | None:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def set(self, key: str, value: Any) -> bool:
        self._data[key] = copy.deepcopy(value)
        return True

    async def delete(self, key: str) -> bool:
        self._data.pop(key, None)
        return True

    async def close(self):
        self._data.clear()


class RedisStore:
    """Redis-backed store holding JSON-encoded values without expiry.

    When Redis cannot be reached the store keeps working from an in-process
    MemoryStore and retries the connection on the next call.
    """

    def __init__(self, url: str, client: redis.Redis | None = None):
        self._url = url
        self._redis: redis.Redis | None = client
        self._fallback = MemoryStore()

    async def _get_redis(self) -> redis.Redis | None:
        if self._redis is None:
            try:
                self._redis = redis.from_url(
                    self._url,
                    encoding="utf-8",
                    decode_responses=True,
                )
                await self._redis.ping()
            except Exception as e:
                logger.warning(f"Redis unavailable, chat state kept in memory: {e}")
                self._redis = None
                return None
        return self._redis

    def _drop_connection(self, error: Exception) -> None:
        logger.warning(f"Redis call failed, chat state kept in memory: {error}")
        self._redis = None

    async def get(self, key: str) -> Any | None:
        r = await self._get_redis()
        if r is None:
            return await self._fallback.get(key)
        try:
            raw = await r.get(key)
        except RedisError as e:
            self._drop_connection(e)
            return await self._fallback.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Discarding corrupt value for {key}: {e}")
            return None

    async def set(self, key: str, value: Any) -> bool:
        r = await self._get_redis()
        if r is None:
            return await self._fallback.set(key, value)
        try:
            await r.set(key, json.dumps(value, default=str))
        except RedisError as e:
            self._drop_connection(e)
            return await self._fallback.set(key, value)
        return True

    async def delete(self, key: str) -> bool:
        await self._fallback.delete(key)
        r = await self._get_redis()
        if r is None:
            return True
        try:
            await r.delete(key)
        except RedisError as e:
            self._drop_connection(e)
        return True

    async def close(self):
        if self._redis:
            await self._redis.aclose()
            self._redis = None
        await self._fallback.close()


def create_store(url: str | None = None) -> MemoryStore | RedisStore:
    url = settings.redis_url if url is None else url
    if url:
        logger.info("Using Redis store for chat state")
        return RedisStore(url)
    logger.info("REDIS_URL not set, chat state kept in memory")
    return MemoryStore()
