"""
Pricing Cache Manager.

The registrar's full TLD pricing table is large and changes rarely, so it is
kept in the local state with a freshness TTL (20 minutes). The cached table
also supplies the valid-TLD set used for TLD extraction.
"""

from typing import Any, Callable, Optional

from .audit_logger import AuditLogger
from .exceptions import RequestError
from .models import ApiResponse, LocalState, PricingCacheEntry, TldLookup
from .rate_limiter import now_ms
from .state_store import StateStore
from .tld_registry import extract_tld, lookup_tld, valid_tlds_from_pricing
from .transport import Transport


PRICING_PATH = "/pricing/get"
PRICING_CACHE_TTL_MINUTES = 20
PRICING_DISCLAIMER = (
    "Pricing shown is not guaranteed and may be cached or incorrect. "
    "For up-to-date pricing, please visit: https://porkbun.com/products/domains"
)


def with_disclaimer(data: Any) -> Any:
    """Prefix a pricing payload with the disclaimer; upstream keys win on collision."""
    if not isinstance(data, dict):
        return data
    return {"pricingDisclaimer": PRICING_DISCLAIMER, **data}


class PricingCache:
    """Read-through cache of the pricing table stored in the state file."""

    COMPONENT = "pricing_cache"

    def __init__(
        self,
        state_store: StateStore,
        transport: Transport,
        clock: Callable[[], int] = now_ms,
        ttl_minutes: int = PRICING_CACHE_TTL_MINUTES,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._state_store = state_store
        self._transport = transport
        self._clock = clock
        self._ttl_minutes = ttl_minutes
        self._logger = logger

    def read(self) -> PricingCacheEntry:
        """Return the cached table and whether it is still within its TTL."""
        state = self._state_store.read()
        age_ms = self._clock() - (state.pricing_cache_timestamp or 0)
        ttl_ms = (state.pricing_cache_ttl or self._ttl_minutes) * 60 * 1000
        fresh = state.pricing_cache is not None and age_ms < ttl_ms
        return PricingCacheEntry(data=state.pricing_cache, fresh=fresh, age_ms=age_ms)

    def store(self, pricing_data: dict) -> LocalState:
        """Persist a freshly fetched table with the current timestamp."""
        stored_at = self._clock()

        def mutate(state: LocalState) -> None:
            state.pricing_cache = pricing_data
            state.pricing_cache_timestamp = stored_at
            state.pricing_cache_ttl = self._ttl_minutes

        return self._state_store.update(mutate)

    async def refresh(self) -> ApiResponse:
        """Fetch the table from the API and cache it."""
        response = await self._transport.post(PRICING_PATH)
        if response.data:
            self.store(response.data)
        return response

    async def get_pricing(self) -> ApiResponse:
        """
        Return the pricing table, from cache while fresh.

        Returns:
            ApiResponse whose data carries the pricing disclaimer

        Raises:
            RequestError: If the cache is stale and the fetch fails
        """
        entry = self.read()
        if entry.fresh:
            if self._logger is not None:
                self._logger.info(
                    self.COMPONENT,
                    f"Returning cached pricing data (age: {entry.age_minutes} minutes)",
                )
            return ApiResponse(data=with_disclaimer(entry.data))

        response = await self.refresh()
        return ApiResponse(data=with_disclaimer(response.data), status_code=response.status_code)

    async def ensure_warm(self) -> None:
        """Populate a cold or stale cache; failures are logged and ignored."""
        if self.read().fresh:
            return
        try:
            await self.refresh()
        except RequestError as e:
            if self._logger is not None:
                self._logger.warn(
                    self.COMPONENT,
                    "Pricing prefetch failed, TLD extraction falls back to last label",
                    {"error": e.message},
                )

    def valid_tlds(self) -> set[str]:
        """TLDs of the cached table; empty when there is no cache."""
        return valid_tlds_from_pricing(self.read().data)

    def extract_tld(self, domain_or_partial: Any) -> Optional[str]:
        """Best-effort TLD using the cached TLD list (stale cache is still used)."""
        return extract_tld(domain_or_partial, self.valid_tlds())

    def lookup_tld(self, domain_or_partial: Any) -> TldLookup:
        return lookup_tld(domain_or_partial, self.valid_tlds())
