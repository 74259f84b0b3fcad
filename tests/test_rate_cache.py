"""
Ledger Engine - Exchange Rate Cache Tests

Tests for the Redis cache in front of exchange-rate lookups.
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from uuid import UUID

from ledger_engine.schemas.fx import ExchangeRateCreate
from ledger_engine.services.fx_service import FXService
from ledger_engine.services.rate_cache import RateCache


TENANT = UUID("7f6c2a52-4a8e-4d55-9a0e-3c1d2b8e9f10")


class TestRateCacheKeys:
    """Test cache key layout."""

    def test_key_format(self):
        cache = RateCache()
        key = cache._key(TENANT, "USD", "JMD", date(2026, 1, 31))
        assert key == f"fx:rate:{TENANT}:USD:JMD:2026-01-31"


class TestRateCacheOperations:
    """Test get/set/invalidate against a mocked Redis client."""

    @pytest.mark.asyncio
    async def test_set_and_get_rate(self):
        cache = RateCache(ttl=60)
        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value="155.250000")
        mock_client.setex = AsyncMock()

        with patch.object(cache, "get_client", return_value=mock_client):
            assert await cache.set_rate(TENANT, "USD", "JMD", date(2026, 1, 31), Decimal("155.25"))
            mock_client.setex.assert_called_once_with(
                f"fx:rate:{TENANT}:USD:JMD:2026-01-31", 60, "155.25",
            )

            rate = await cache.get_rate(TENANT, "USD", "JMD", date(2026, 1, 31))
            assert rate == Decimal("155.25")

    @pytest.mark.asyncio
    async def test_cache_miss(self):
        cache = RateCache()
        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=None)

        with patch.object(cache, "get_client", return_value=mock_client):
            assert await cache.get_rate(TENANT, "USD", "JMD", date(2026, 1, 31)) is None

    @pytest.mark.asyncio
    async def test_garbage_value_is_a_miss(self):
        cache = RateCache()
        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value="not-a-rate")

        with patch.object(cache, "get_client", return_value=mock_client):
            assert await cache.get_rate(TENANT, "USD", "JMD", date(2026, 1, 31)) is None

    @pytest.mark.asyncio
    async def test_redis_down_degrades_to_miss(self):
        cache = RateCache()
        mock_client = AsyncMock()
        mock_client.get = AsyncMock(side_effect=ConnectionError("Connection refused"))
        mock_client.setex = AsyncMock(side_effect=ConnectionError("Connection refused"))

        with patch.object(cache, "get_client", return_value=mock_client):
            assert await cache.get_rate(TENANT, "USD", "JMD", date(2026, 1, 31)) is None
            assert await cache.set_rate(TENANT, "USD", "JMD", date(2026, 1, 31), Decimal("1")) is False

    @pytest.mark.asyncio
    async def test_invalidate_tenant(self):
        cache = RateCache()
        keys = [f"fx:rate:{TENANT}:USD:JMD:2026-01-31", f"fx:rate:{TENANT}:EUR:JMD:2026-01-31"]

        async def scan_iter(match):
            for key in keys:
                yield key

        mock_client = AsyncMock()
        mock_client.scan_iter = scan_iter
        mock_client.delete = AsyncMock(return_value=2)

        with patch.object(cache, "get_client", return_value=mock_client):
            assert await cache.invalidate_tenant(TENANT) == 2
            mock_client.delete.assert_called_once_with(*keys)


class TestCachedLookup:
    """Test the FX service reading through the cache."""

    @pytest.mark.asyncio
    async def test_cache_hit_skips_database(self, db_session, tenant_id):
        cache = AsyncMock(spec=RateCache)
        cache.get_rate = AsyncMock(return_value=Decimal("157.00"))

        rate = await FXService(db_session, rate_cache=cache).get_exchange_rate(
            tenant_id, "USD", as_of=date(2026, 1, 31), use_cache=True,
        )
        assert rate == Decimal("157.00")
        cache.set_rate.assert_not_called()

    @pytest.mark.asyncio
    async def test_cache_miss_stores_database_rate(self, db_session, tenant_id):
        cache = AsyncMock(spec=RateCache)
        cache.get_rate = AsyncMock(return_value=None)
        service = FXService(db_session, rate_cache=cache)
        await service.record_exchange_rate(tenant_id, ExchangeRateCreate(
            from_currency="USD", rate=Decimal("155.00"), rate_date=date(2026, 1, 31),
        ))

        rate = await service.get_exchange_rate(tenant_id, "USD", as_of=date(2026, 1, 31), use_cache=True)
        assert rate == Decimal("155.00")
        cache.set_rate.assert_called_once_with(tenant_id, "USD", "JMD", date(2026, 1, 31), rate)
