"""
Ledger Engine - Exchange Rate Cache

Redis cache in front of exchange-rate lookups. Rates are keyed per tenant,
currency pair and as-of date. Redis being unavailable never fails a
lookup: every operation degrades to a cache miss and logs a warning.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

import redis.asyncio as redis

from ledger_engine.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class RateCache:
    """Redis-backed cache for resolved exchange rates."""

    PREFIX_FX_RATE = "fx:rate"

    def __init__(self, redis_url: Optional[str] = None, ttl: Optional[int] = None):
        self.redis_url = redis_url or settings.redis_url
        self.ttl = ttl or settings.fx_rate_cache_ttl
        self._client: Optional[redis.Redis] = None

    async def get_client(self) -> redis.Redis:
        """Get or create Redis client."""
        if self._client is None:
            self._client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def close(self):
        if self._client:
            await self._client.close()
            self._client = None

    def _key(
        self,
        tenant_id: uuid.UUID,
        from_currency: str,
        to_currency: str,
        as_of: date,
    ) -> str:
        return f"{self.PREFIX_FX_RATE}:{tenant_id}:{from_currency}:{to_currency}:{as_of.isoformat()}"

    async def get_rate(
        self,
        tenant_id: uuid.UUID,
        from_currency: str,
        to_currency: str,
        as_of: date,
    ) -> Optional[Decimal]:
        key = self._key(tenant_id, from_currency, to_currency, as_of)
        try:
            client = await self.get_client()
            value = await client.get(key)
        except Exception as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None
        if not value:
            return None
        try:
            return Decimal(value)
        except InvalidOperation:
            logger.warning(f"Invalid rate in cache for {key}: {value!r}")
            return None

    async def set_rate(
        self,
        tenant_id: uuid.UUID,
        from_currency: str,
        to_currency: str,
        as_of: date,
        rate: Decimal,
    ) -> bool:
        key = self._key(tenant_id, from_currency, to_currency, as_of)
        try:
            client = await self.get_client()
            await client.setex(key, self.ttl, str(rate))
            return True
        except Exception as e:
            logger.warning(f"Cache set failed for {key}: {e}")
            return False

    async def invalidate_tenant(self, tenant_id: uuid.UUID) -> int:
        """Drop every cached rate of a tenant (after a rate is recorded)."""
        pattern = f"{self.PREFIX_FX_RATE}:{tenant_id}:*"
        try:
            client = await self.get_client()
            keys = [key async for key in client.scan_iter(match=pattern)]
            if keys:
                return await client.delete(*keys)
            return 0
        except Exception as e:
            logger.warning(f"Cache invalidation failed for {pattern}: {e}")
            return 0


_rate_cache: Optional[RateCache] = None


def get_rate_cache() -> RateCache:
    """Process-wide cache instance."""
    global _rate_cache
    if _rate_cache is None:
        _rate_cache = RateCache()
    return _rate_cache
