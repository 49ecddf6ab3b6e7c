"""
Snapshot cache.

Keeps the latest TechnicalSnapshot per ticker for a short TTL so a refresh
cycle can skip recomputing tickers whose bars have not changed. Entries live
in Redis when a client is supplied, otherwise (or when Redis errors) in an
in-memory dict owned by the cache instance.
"""

import logging
import time
from typing import Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from technicals.core.config import settings
from technicals.schemas.snapshot import TechnicalSnapshot

logger = logging.getLogger(__name__)


async def connect_redis(url: Optional[str] = None) -> Optional[redis.Redis]:
    """
    Open a Redis client and ping it.
    Returns None (memory-only caching) when the server is unreachable.
    """
    url = url or settings.redis_url
    client = redis.from_url(url, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
        logger.info(f"Redis connected: {url}")
        return client
    except RedisError as e:
        logger.warning(f"Redis connection failed: {e}. Using in-memory fallback.")
        await client.aclose()
        return None


class SnapshotCache:
    """
    TTL cache of snapshots keyed by ticker.

    Keys:
    - {prefix}:snapshot:{TICKER} -> TechnicalSnapshot JSON

    ``clock`` drives expiry of in-memory entries; Redis entries expire on the
    server with the same TTL.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        redis_client: Optional[redis.Redis] = None,
        key_prefix: Optional[str] = None,
    ):
        self.ttl_seconds = (
            settings.snapshot_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        )
        self._clock = clock
        self._redis = redis_client
        self._prefix = key_prefix or settings.redis_key_prefix or "technicals"
        self._memory: dict[str, tuple[float, str]] = {}

    @property
    def redis(self) -> Optional[redis.Redis]:
        return self._redis

    def _key(self, ticker: str) -> str:
        return f"{self._prefix}:snapshot:{ticker.upper()}"

    # ============ Memory fallback ============

    def _memory_get(self, key: str) -> Optional[str]:
        entry = self._memory.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._memory[key]
            return None
        return value

    def _memory_set(self, key: str, value: str) -> None:
        self._memory[key] = (self._clock() + self.ttl_seconds, value)

    # ============ Public API ============

    async def get(self, ticker: str) -> Optional[TechnicalSnapshot]:
        """Cached snapshot for a ticker, or None if missing or expired."""
        key = self._key(ticker)

        if self.redis:
            try:
                value = await self.redis.get(key)
                return TechnicalSnapshot.model_validate_json(value) if value else None
            except RedisError as e:
                logger.debug(f"Redis get snapshot failed: {e}")

        value = self._memory_get(key)
        return TechnicalSnapshot.model_validate_json(value) if value else None

    async def set(self, ticker: str, snapshot: TechnicalSnapshot) -> None:
        key = self._key(ticker)
        value = snapshot.model_dump_json()

        if self.redis:
            try:
                await self.redis.set(key, value, px=max(1, int(self.ttl_seconds * 1000)))
                return
            except RedisError as e:
                logger.debug(f"Redis set snapshot failed: {e}")

        self._memory_set(key, value)

    async def invalidate(self, ticker: str) -> None:
        key = self._key(ticker)

        if self.redis:
            try:
                await self.redis.delete(key)
            except RedisError as e:
                logger.debug(f"Redis delete snapshot failed: {e}")

        self._memory.pop(key, None)

    async def clear(self) -> None:
        """Drop every snapshot under this cache's prefix."""
        if self.redis:
            try:
                async for key in self.redis.scan_iter(match=f"{self._prefix}:snapshot:*"):
                    await self.redis.delete(key)
            except RedisError as e:
                logger.debug(f"Redis clear snapshots failed: {e}")

        self._memory.clear()

    async def close(self) -> None:
        """Close the Redis client, if any; later calls use memory only."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info("Redis connection closed")
