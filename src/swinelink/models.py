"""
Data models for the swinelink client.

This module defines the persisted local state, the uniform response wrapper
returned by every API operation, and the small result types produced by the
rate limiter, pricing cache and TLD lookup.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import CooldownState, TldLookupStatus


# JSON keys of the persisted state file
STATE_KEYS = {
    "last_domain_check": "lastDomainCheck",
    "domain_check_cooldown": "domainCheckCooldown",
    "pricing_cache": "pricingCache",
    "pricing_cache_timestamp": "pricingCacheTimestamp",
    "pricing_cache_ttl": "pricingCacheTTL",
}

# Fields dropped on load unless they hold a JSON number
NUMERIC_FIELDS = (
    "last_domain_check",
    "domain_check_cooldown",
    "pricing_cache_timestamp",
    "pricing_cache_ttl",
)


@dataclass
class LocalState:
    """
    Contents of the local state file.

    Timestamps are epoch milliseconds, the cooldown is in seconds and the
    pricing TTL in minutes. Keys the client does not know about are kept in
    ``extra`` so that a write never drops them.
    """

    last_domain_check: Optional[int] = None
    domain_check_cooldown: Optional[float] = None
    pricing_cache: Optional[dict] = None
    pricing_cache_timestamp: Optional[int] = None
    pricing_cache_ttl: Optional[float] = None
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "LocalState":
        """Build a state from the decoded JSON object of the state file."""
        if not isinstance(data, dict):
            return cls()
        known = {attr: data.get(key) for attr, key in STATE_KEYS.items()}
        for attr in NUMERIC_FIELDS:
            value = known[attr]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                known[attr] = None
        if not isinstance(known["pricing_cache"], dict):
            known["pricing_cache"] = None
        extra = {k: v for k, v in data.items() if k not in STATE_KEYS.values()}
        return cls(**known, extra=extra)

    def to_dict(self) -> dict:
        """Serialize to the JSON object written to the state file; unset fields are omitted."""
        data = dict(self.extra)
        for attr, key in STATE_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                data[key] = value
        return data


@dataclass
class ApiResponse:
    """Successful API operation result. ``data`` is the (possibly enriched) JSON body."""

    data: Any
    status_code: int = 200


@dataclass
class CooldownStatus:
    """Result of a domain-check cooldown evaluation."""

    state: CooldownState
    time_left: int = 0

    @property
    def allowed(self) -> bool:
        return self.state is CooldownState.ALLOWED


@dataclass
class PricingCacheEntry:
    """A pricing table read from the state file together with its freshness."""

    data: Optional[dict]
    fresh: bool
    age_ms: int = 0

    @property
    def age_minutes(self) -> int:
        return round(self.age_ms / 60000)


@dataclass
class TldLookup:
    """Tri-state outcome of a TLD lookup against the cached TLD list."""

    status: TldLookupStatus
    tld: Optional[str] = None
