"""
Porkbun API client.

One coroutine per remote operation. Domain-scoped operations validate the
domain before any I/O, then issue exactly one signed POST. Availability checks
additionally pass through the cooldown and enrich the response; pricing goes
through the local cache and takes no domain at all.

Every operation returns an ApiResponse (``.data`` is the JSON body) or raises:
- DomainValidationError: bad input, nothing was sent
- RateLimitError: check attempted during the cooldown, nothing was sent
- ApiError / NetworkError: the request itself failed
"""

from typing import Any, Callable, Optional

from .audit_logger import AuditLogger
from .config import SystemConfig
from .domain_validator import validate_domain
from .models import ApiResponse
from .pricing_cache import PRICING_DISCLAIMER, PricingCache
from .rate_limiter import DomainCheckRateLimiter, now_ms
from .state_store import StateStore
from .transport import Transport


class PorkbunClient:
    """
    Rate-limited, cache-aware client for the registrar JSON API.

    Usage:
        async with PorkbunClient(load_config()) as client:
            response = await client.check_availability("example.com")
            print(response.data)
    """

    COMPONENT = "client"

    def __init__(
        self,
        config: SystemConfig,
        logger: Optional[AuditLogger] = None,
        transport: Optional[Transport] = None,
        state_store: Optional[StateStore] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: System configuration (credentials, state file, logging)
            logger: Optional logger; defaults to one built from config.logging
            transport: Optional pre-built transport (tests inject one)
            state_store: Optional pre-built state store (tests inject one)
            clock: Returns the current time in epoch milliseconds

        Raises:
            ConfigurationError: If no transport is given and credentials are missing
        """
        self._config = config
        self._logger = logger or AuditLogger(
            output_format=config.logging.output_format,
            level=config.logging.level,
        )
        self._transport = transport or Transport(config.api, logger=self._logger)
        self._state_store = state_store or StateStore(
            config.persistence.state_file_path,
            logger=self._logger,
        )
        self._rate_limiter = DomainCheckRateLimiter(
            self._state_store,
            clock=clock,
            logger=self._logger,
        )
        self._pricing_cache = PricingCache(
            self._state_store,
            self._transport,
            clock=clock,
            logger=self._logger,
        )

    async def __aenter__(self) -> "PorkbunClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def state_store(self) -> StateStore:
        return self._state_store

    @property
    def pricing_cache(self) -> PricingCache:
        return self._pricing_cache

    @property
    def rate_limiter(self) -> DomainCheckRateLimiter:
        return self._rate_limiter

    async def close(self) -> None:
        await self._transport.close()

    # -- Core ---------------------------------------------------------------

    async def ping(self) -> ApiResponse:
        return await self._transport.post("/ping")

    # -- Domains ------------------------------------------------------------

    async def check_availability(self, domain: str) -> ApiResponse:
        """
        Check whether ``domain`` can be registered.

        The pricing cache is warmed first (errors ignored) so the recognised
        TLD can be matched against the registrar's TLD list. On success the
        cooldown is charged and the response gains ``queriedDomain``,
        ``recognizedTLD`` and ``pricingDisclaimer`` at the top level, and
        ``queriedDomain``, ``recognizedTLD`` and ``priceWarning`` inside the
        nested ``response`` object.

        Raises:
            DomainValidationError: Malformed domain
            RateLimitError: Previous check is still cooling down
            ApiError, NetworkError: The check request failed (cooldown not charged)
        """
        validate_domain(domain)
        self._rate_limiter.ensure_allowed()

        await self._pricing_cache.ensure_warm()
        response = await self._transport.post(f"/domain/checkDomain/{domain}")

        self._rate_limiter.record_success(response.data)
        response.data = self._enrich_check_response(domain, response.data)
        return response

    def _enrich_check_response(self, domain: str, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        recognized_tld = self._pricing_cache.extract_tld(domain)
        nested = data.get("response")
        if isinstance(nested, dict):
            nested["queriedDomain"] = domain
            nested["recognizedTLD"] = recognized_tld
            nested["priceWarning"] = PRICING_DISCLAIMER

        return {
            "queriedDomain": domain,
            "recognizedTLD": recognized_tld,
            "pricingDisclaimer": PRICING_DISCLAIMER,
            **data,
        }

    async def list_domains(self) -> ApiResponse:
        return await self._transport.post("/domain/listAll")

    async def get_pricing(self) -> ApiResponse:
        """Full pricing table, served from the 20-minute cache when fresh. No validation."""
        return await self._pricing_cache.get_pricing()

    # -- DNS records --------------------------------------------------------

    async def dns_create_record(self, domain: str, record: dict) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/dns/create/{domain}", record)

    async def dns_list_records(self, domain: str) -> ApiResponse:
        # The API has no list endpoint; retrieve without an id returns every record.
        validate_domain(domain)
        return await self._transport.post(f"/dns/retrieve/{domain}")

    async def dns_retrieve_record(self, domain: str, record_id: str) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/dns/retrieve/{domain}/{record_id}")

    async def dns_retrieve_record_by_name_type(
        self,
        domain: str,
        record_type: str,
        subdomain: str = "",
    ) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/dns/retrieveByNameType/{domain}/{record_type}/{subdomain}")

    async def dns_update_record(self, domain: str, record_id: str, record: dict) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/dns/edit/{domain}/{record_id}", record)

    async def dns_update_record_by_name_type(
        self,
        domain: str,
        record_type: str,
        record: dict,
        subdomain: str = "",
    ) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/dns/editByNameType/{domain}/{record_type}/{subdomain}", record)

    async def dns_delete_record(self, domain: str, record_id: str) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/dns/delete/{domain}/{record_id}")

    async def dns_delete_record_by_name_type(
        self,
        domain: str,
        record_type: str,
        subdomain: str = "",
    ) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/dns/deleteByNameType/{domain}/{record_type}/{subdomain}")

    # -- SSL ----------------------------------------------------------------

    async def ssl_retrieve(self, domain: str) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/ssl/retrieve/{domain}")

    # -- URL forwarding -----------------------------------------------------

    async def url_forwarding_list(self, domain: str) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/domain/getUrlForwarding/{domain}")

    async def url_forwarding_create(self, domain: str, record: dict) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/domain/addUrlForward/{domain}", record)

    async def url_forwarding_delete(self, domain: str, record_id: str) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/domain/deleteUrlForward/{domain}/{record_id}")

    # -- DNSSEC -------------------------------------------------------------

    async def create_dnssec_record(self, domain: str, record: dict) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/dns/createDnssecRecord/{domain}", record)

    async def get_dnssec_records(self, domain: str) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/dns/getDnssecRecords/{domain}")

    async def delete_dnssec_record(self, domain: str, keytag: str) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/dns/deleteDnssecRecord/{domain}/{keytag}")

    # -- Nameservers --------------------------------------------------------

    async def get_nameservers(self, domain: str) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/domain/getNs/{domain}")

    async def update_nameservers(self, domain: str, nameservers: list[str]) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/domain/updateNs/{domain}", {"ns": list(nameservers)})

    # -- Glue records -------------------------------------------------------

    async def create_glue_record(self, domain: str, host: str, ip: Any) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/domain/createGlue/{domain}/{host}", {"ip": ip})

    async def update_glue_record(self, domain: str, host: str, ip: Any) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/domain/updateGlue/{domain}/{host}", {"ip": ip})

    async def delete_glue_record(self, domain: str, host: str) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/domain/deleteGlue/{domain}/{host}")

    async def get_glue_records(self, domain: str) -> ApiResponse:
        validate_domain(domain)
        return await self._transport.post(f"/domain/getGlue/{domain}")
