"""
TLD Registry - TLD extraction against the registrar's list of sold TLDs.

The set of valid TLDs is the key set of the cached pricing table, so compound
TLDs such as ``co.uk`` are recognised without a bundled public-suffix list.
"""

import re
from collections.abc import Collection
from typing import Any, Iterable, Optional, Union

from .enums import TldLookupStatus
from .models import TldLookup


# Separators accepted between requested TLDs in free-form filter input
FILTER_SPLIT_PATTERN = re.compile(r"[,;\s]+")


def valid_tlds_from_pricing(pricing_data: Any) -> set[str]:
    """Return the TLDs listed in a pricing response (``{"pricing": {tld: ...}}``)."""
    if not isinstance(pricing_data, dict):
        return set()
    table = pricing_data.get("pricing")
    if not isinstance(table, dict):
        return set()
    return {str(tld).lower() for tld in table}


def _clean(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    cleaned = value.strip().lstrip(".")
    if cleaned.endswith("."):
        cleaned = cleaned[:-1]
    return cleaned or None


def lookup_tld(value: Any, valid_tlds: Optional[Collection[str]]) -> TldLookup:
    """
    Find the TLD of a domain, bare TLD or compound TLD.

    Suffixes are tried longest first (``a.b.c``, ``b.c``, ``c``) so ``co.uk``
    wins over ``uk``.

    Args:
        value: Domain or partial string, leading dots ignored
        valid_tlds: Known TLDs; None or empty means no list is available

    Returns:
        TldLookup distinguishing a match, no match, and no TLD list
    """
    cleaned = _clean(value)
    if not valid_tlds:
        return TldLookup(status=TldLookupStatus.CACHE_UNAVAILABLE)
    if cleaned is None:
        return TldLookup(status=TldLookupStatus.NOT_RECOGNIZED)

    labels = cleaned.lower().split(".")
    for i in range(len(labels)):
        candidate = ".".join(labels[i:])
        if candidate in valid_tlds:
            return TldLookup(status=TldLookupStatus.FOUND, tld=candidate)
    return TldLookup(status=TldLookupStatus.NOT_RECOGNIZED)


def extract_tld(value: Any, valid_tlds: Optional[Collection[str]]) -> Optional[str]:
    """
    Best-effort TLD of ``value``.

    A bare TLD (no dot) is returned only if it is known. For anything with a
    dot the longest known suffix is returned, falling back to the last label
    unchecked so that there is always something to display.
    """
    cleaned = _clean(value)
    if cleaned is None:
        return None

    lookup = lookup_tld(cleaned, valid_tlds)
    if lookup.status is TldLookupStatus.FOUND:
        return lookup.tld
    if "." not in cleaned:
        return None
    return cleaned.rsplit(".", 1)[-1] or None


def parse_tld_filter(requested: Union[str, Iterable[str]], valid_tlds: Collection[str]) -> list[str]:
    """
    Turn free-form filter input into known TLDs.

    Accepts a string or a list of strings separated by commas, semicolons or
    whitespace; each item may be a TLD (``.com``, ``co.uk``) or a domain.
    Unknown items are dropped, order is kept and duplicates removed.
    """
    combined = requested if isinstance(requested, str) else " ".join(requested)
    result: list[str] = []
    for item in FILTER_SPLIT_PATTERN.split(combined):
        lookup = lookup_tld(item, valid_tlds)
        if lookup.status is TldLookupStatus.FOUND and lookup.tld not in result:
            result.append(lookup.tld)
    return result


def filter_pricing(
    pricing_data: dict,
    requested: Union[str, Iterable[str]],
) -> tuple[dict, list[str]]:
    """
    Restrict a pricing table to the requested TLDs.

    Args:
        pricing_data: Pricing response with a ``pricing`` mapping
        requested: Free-form TLD/domain filter input

    Returns:
        Tuple of (filtered table, requested items that matched no known TLD)
    """
    table = pricing_data.get("pricing") or {}
    valid = valid_tlds_from_pricing(pricing_data)
    items = [
        item for item in FILTER_SPLIT_PATTERN.split(
            requested if isinstance(requested, str) else " ".join(requested)
        ) if item
    ]
    matched = parse_tld_filter(items, valid)
    missing = [item for item in items if lookup_tld(item, valid).status is not TldLookupStatus.FOUND]
    lowered = {str(k).lower(): k for k in table}
    filtered = {tld: table[lowered[tld]] for tld in matched if tld in lowered}
    return filtered, missing
