"""
Enumeration types for the swinelink client.

These enums provide type-safe constants for validation failures, cooldown
state, TLD lookup outcomes and log levels.
"""

from enum import Enum


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures, in the order they are checked."""

    EMPTY_INPUT = "empty_input"
    TOO_LONG = "too_long"
    TOO_SHORT = "too_short"
    TOO_FEW_LABELS = "too_few_labels"
    EMPTY_LABEL = "empty_label"
    LABEL_TOO_LONG = "label_too_long"
    FORBIDDEN_CHARS = "forbidden_chars"
    HYPHEN_EDGE = "hyphen_edge"
    TLD_TOO_SHORT = "tld_too_short"
    INVALID_TLD = "invalid_tld"
    IDNA_ERROR = "idna_error"


class CooldownState(Enum):
    """State of the domain-check rate limiter."""

    ALLOWED = "allowed"
    COOLING = "cooling"


class TldLookupStatus(Enum):
    """Outcome of matching a string against the cached TLD list."""

    FOUND = "found"
    NOT_RECOGNIZED = "not_recognized"
    CACHE_UNAVAILABLE = "cache_unavailable"
