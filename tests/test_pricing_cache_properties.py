"""
Property-based tests for the Pricing Cache module.

Uses Hypothesis to verify the 20-minute freshness window: a fresh table is
served without any request, a stale or missing one is fetched and replaces
the cached copy, and every pricing payload carries the disclaimer.
"""

import asyncio
import tempfile
from pathlib import Path

from hypothesis import given, settings
from hypothesis import strategies as st

from swinelink.enums import LogLevel, TldLookupStatus
from swinelink.models import LocalState
from swinelink.pricing_cache import (
    PRICING_CACHE_TTL_MINUTES,
    PRICING_DISCLAIMER,
    PricingCache,
    with_disclaimer,
)
from swinelink.state_store import StateStore

from fake_api import PRICING_RESPONSE, FakeApi, FakeClock, quiet_logger


CACHED_PRICING = {"status": "SUCCESS", "pricing": {"net": {"registration": "12.52"}}}


def _cache(tmpdir: str, api: FakeApi, clock: FakeClock, state: LocalState = None):
    logger = quiet_logger()
    store = StateStore(Path(tmpdir) / "state.json", logger=logger)
    if state is not None:
        store.write(state)
    cache = PricingCache(store, api.transport(logger), clock=clock, logger=logger)
    return cache, store, logger


class TestFreshCacheServedLocally:
    """
    Property: fresh cache short-circuits the network.

    *For any* cache age below 20 minutes, get_pricing SHALL return the cached
    table and SHALL NOT send a request.
    """

    @given(age_seconds=st.integers(min_value=0, max_value=PRICING_CACHE_TTL_MINUTES * 60 - 1))
    @settings(max_examples=50, deadline=None)
    def test_no_request_while_fresh(self, age_seconds: int) -> None:
        clock = FakeClock()
        api = FakeApi({"/pricing/get": (200, PRICING_RESPONSE)})
        with tempfile.TemporaryDirectory() as tmpdir:
            cache, _, _ = _cache(tmpdir, api, clock, LocalState(
                pricing_cache=CACHED_PRICING,
                pricing_cache_timestamp=clock.now - age_seconds * 1000,
                pricing_cache_ttl=20,
            ))
            response = asyncio.run(cache.get_pricing())
            assert api.requests == []
            assert response.data["pricing"] == CACHED_PRICING["pricing"]
            assert response.data["pricingDisclaimer"] == PRICING_DISCLAIMER

    def test_cache_age_is_logged(self) -> None:
        clock = FakeClock()
        api = FakeApi()
        with tempfile.TemporaryDirectory() as tmpdir:
            cache, _, logger = _cache(tmpdir, api, clock, LocalState(
                pricing_cache=CACHED_PRICING,
                pricing_cache_timestamp=clock.now - 5 * 60 * 1000,
            ))
            asyncio.run(cache.get_pricing())
            messages = [e.message for e in logger.entries if e.level is LogLevel.INFO]
            assert "Returning cached pricing data (age: 5 minutes)" in messages


class TestStaleCacheRefetched:
    """
    Property: stale or missing cache is replaced.

    *For any* cache age of 20 minutes or more, get_pricing SHALL send exactly
    one request and overwrite both the table and its timestamp.
    """

    @given(age_minutes=st.integers(min_value=PRICING_CACHE_TTL_MINUTES, max_value=24 * 60))
    @settings(max_examples=30, deadline=None)
    def test_stale_cache_overwritten(self, age_minutes: int) -> None:
        clock = FakeClock()
        api = FakeApi({"/pricing/get": (200, PRICING_RESPONSE)})
        with tempfile.TemporaryDirectory() as tmpdir:
            cache, store, _ = _cache(tmpdir, api, clock, LocalState(
                pricing_cache=CACHED_PRICING,
                pricing_cache_timestamp=clock.now - age_minutes * 60 * 1000,
            ))
            response = asyncio.run(cache.get_pricing())
            assert api.paths == ["/pricing/get"]
            assert response.data == with_disclaimer(PRICING_RESPONSE)

            state = store.read()
            assert state.pricing_cache == PRICING_RESPONSE
            assert state.pricing_cache_timestamp == clock.now
            assert state.pricing_cache_ttl == PRICING_CACHE_TTL_MINUTES

    def test_twenty_five_minutes_old(self) -> None:
        clock = FakeClock()
        api = FakeApi({"/pricing/get": (200, PRICING_RESPONSE)})
        with tempfile.TemporaryDirectory() as tmpdir:
            cache, store, _ = _cache(tmpdir, api, clock, LocalState(
                pricing_cache=CACHED_PRICING,
                pricing_cache_timestamp=clock.now - 25 * 60 * 1000,
            ))
            asyncio.run(cache.get_pricing())
            assert len(api.requests) == 1
            assert store.read().pricing_cache_timestamp == clock.now

    def test_missing_cache_fetched_then_reused(self) -> None:
        clock = FakeClock()
        api = FakeApi({"/pricing/get": (200, PRICING_RESPONSE)})
        with tempfile.TemporaryDirectory() as tmpdir:
            cache, _, _ = _cache(tmpdir, api, clock)

            async def run_test():
                await cache.get_pricing()
                clock.advance(60)
                return await cache.get_pricing()

            response = asyncio.run(run_test())
            assert api.paths == ["/pricing/get"]
            assert response.data["pricing"] == PRICING_RESPONSE["pricing"]

    def test_pricing_request_is_signed_without_domain(self) -> None:
        clock = FakeClock()
        api = FakeApi({"/pricing/get": (200, PRICING_RESPONSE)})
        with tempfile.TemporaryDirectory() as tmpdir:
            cache, _, _ = _cache(tmpdir, api, clock)
            asyncio.run(cache.get_pricing())
            _, body = api.requests[0]
            assert set(body) == {"apikey", "secretapikey"}


class TestEnsureWarm:
    """Prefetch before a check never fails the check."""

    def test_failure_is_swallowed_and_logged(self) -> None:
        clock = FakeClock()
        api = FakeApi({"/pricing/get": (500, {"status": "ERROR", "message": "down"})})
        with tempfile.TemporaryDirectory() as tmpdir:
            cache, store, logger = _cache(tmpdir, api, clock)
            asyncio.run(cache.ensure_warm())
            assert api.paths == ["/pricing/get"]
            assert store.read().pricing_cache is None
            assert any(e.level is LogLevel.WARN for e in logger.entries)

    def test_fresh_cache_not_refetched(self) -> None:
        clock = FakeClock()
        api = FakeApi()
        with tempfile.TemporaryDirectory() as tmpdir:
            cache, _, _ = _cache(tmpdir, api, clock, LocalState(
                pricing_cache=PRICING_RESPONSE,
                pricing_cache_timestamp=clock.now,
            ))
            asyncio.run(cache.ensure_warm())
            assert api.requests == []

    def test_stale_cache_still_used_for_tlds(self) -> None:
        clock = FakeClock()
        api = FakeApi()
        with tempfile.TemporaryDirectory() as tmpdir:
            cache, _, _ = _cache(tmpdir, api, clock, LocalState(
                pricing_cache=PRICING_RESPONSE,
                pricing_cache_timestamp=clock.now - 24 * 60 * 60 * 1000,
            ))
            assert not cache.read().fresh
            assert cache.extract_tld("shop.co.uk") == "co.uk"
            assert cache.lookup_tld("shop.co.uk").status is TldLookupStatus.FOUND

    def test_no_cache_means_lookup_unavailable(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            cache, _, _ = _cache(tmpdir, FakeApi(), FakeClock())
            assert cache.lookup_tld("example.com").status is TldLookupStatus.CACHE_UNAVAILABLE
            assert cache.extract_tld("example.com") == "com"


class TestDisclaimer:
    """Upstream keys are kept alongside the disclaimer."""

    def test_disclaimer_added(self) -> None:
        data = with_disclaimer({"status": "SUCCESS"})
        assert data == {"pricingDisclaimer": PRICING_DISCLAIMER, "status": "SUCCESS"}
        assert list(data)[0] == "pricingDisclaimer"

    def test_non_dict_untouched(self) -> None:
        assert with_disclaimer(None) is None
