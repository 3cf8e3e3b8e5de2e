"""
Swinelink - client for the Porkbun domain registrar JSON API.

This package provides a rate-limited, cache-aware async API client with
domain validation, a persistent local state file for the availability-check
cooldown and the TLD pricing cache, and a command-line front end.
"""

__version__ = "1.1.0"

from swinelink.exceptions import (
    SwinelinkError,
    ValidationError,
    DomainValidationError,
    ConfigurationError,
    PersistenceError,
    RequestError,
    RateLimitError,
    ApiError,
    NetworkError,
)
from swinelink.enums import (
    LogLevel,
    DomainValidationErrorCode,
    CooldownState,
    TldLookupStatus,
)
from swinelink.models import (
    LocalState,
    ApiResponse,
    CooldownStatus,
    PricingCacheEntry,
    TldLookup,
)
from swinelink.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    validate_domain,
    normalize_to_canonical,
)
from swinelink.config import (
    ApiConfig,
    PersistenceConfig,
    LoggingConfig,
    SystemConfig,
    load_config,
    create_default_user_config,
)
from swinelink.audit_logger import (
    AuditLogger,
    LogEntry,
)
from swinelink.state_store import StateStore
from swinelink.transport import Transport
from swinelink.rate_limiter import DomainCheckRateLimiter
from swinelink.tld_registry import (
    extract_tld,
    lookup_tld,
    filter_pricing,
)
from swinelink.pricing_cache import (
    PricingCache,
    PRICING_DISCLAIMER,
)
from swinelink.client import PorkbunClient

__all__ = [
    # Exceptions
    "SwinelinkError",
    "ValidationError",
    "DomainValidationError",
    "ConfigurationError",
    "PersistenceError",
    "RequestError",
    "RateLimitError",
    "ApiError",
    "NetworkError",
    # Enums
    "LogLevel",
    "DomainValidationErrorCode",
    "CooldownState",
    "TldLookupStatus",
    # Models
    "LocalState",
    "ApiResponse",
    "CooldownStatus",
    "PricingCacheEntry",
    "TldLookup",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "validate_domain",
    "normalize_to_canonical",
    # Configuration
    "ApiConfig",
    "PersistenceConfig",
    "LoggingConfig",
    "SystemConfig",
    "load_config",
    "create_default_user_config",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Components
    "StateStore",
    "Transport",
    "DomainCheckRateLimiter",
    "extract_tld",
    "lookup_tld",
    "filter_pricing",
    "PricingCache",
    "PRICING_DISCLAIMER",
    # Client
    "PorkbunClient",
]
