"""
Request signing and HTTP transport for the registrar API.

Every call is a JSON POST to ``base_url + path`` with the API credentials
injected into the body. Nothing is retried.
"""

from typing import Any, Optional

import httpx

from .audit_logger import AuditLogger
from .config import ApiConfig
from .exceptions import ApiError, ConfigurationError, NetworkError
from .models import ApiResponse


class Transport:
    """
    Async HTTP transport with credential injection.

    Caller fields are merged first and the two credential fields are written
    last, so a record that happens to contain ``apikey`` or ``secretapikey``
    can never replace the configured credentials.
    """

    COMPONENT = "transport"

    def __init__(
        self,
        config: ApiConfig,
        logger: Optional[AuditLogger] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            config: API credentials and base URL
            logger: Optional logger for requests and failures
            http_transport: Optional httpx transport (tests pass httpx.MockTransport)

        Raises:
            ConfigurationError: If the API key or secret key is missing
        """
        missing = config.missing_credentials
        if missing:
            raise ConfigurationError(
                code="missing_credentials",
                message=(
                    f"Missing API credentials: {', '.join(missing)}. "
                    "Run 'swinelink config init' and edit the config file, "
                    "or set the environment variables."
                ),
                details={"missing": missing},
            )

        self._config = config
        self._logger = logger
        self._http_transport = http_transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "Transport":
        """Async context manager entry."""
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            kwargs: dict[str, Any] = {
                "base_url": self._config.base_url.rstrip("/"),
                "headers": {"Content-Type": "application/json"},
            }
            if self._http_transport is not None:
                kwargs["transport"] = self._http_transport
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    def sign(self, body: Optional[dict] = None) -> dict:
        """Return ``body`` with the credential fields added (credentials win)."""
        signed = dict(body or {})
        signed["apikey"] = self._config.api_key
        signed["secretapikey"] = self._config.secret_key
        return signed

    async def post(self, path: str, body: Optional[dict] = None) -> ApiResponse:
        """
        POST a signed JSON body to ``path``.

        Args:
            path: API path beginning with '/', e.g. '/dns/create/example.com'
            body: Operation-specific fields

        Returns:
            ApiResponse with the decoded JSON body

        Raises:
            ApiError: Upstream answered with a non-2xx status or a non-JSON body
            NetworkError: No response was received
        """
        client = self._ensure_client()
        signed = self.sign(body)
        url = f"{self._config.base_url.rstrip('/')}{path}"

        if self._logger is not None:
            self._logger.debug(self.COMPONENT, f"POST {path}", {"body": signed})

        try:
            response = await client.post(path, json=signed)
        except httpx.TimeoutException as e:
            raise self._network_failure("timeout", f"Request timed out: {e}", url, e)
        except httpx.HTTPError as e:
            raise self._network_failure("network_error", f"Request failed: {e}", url, e)

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_success and data is not None:
            return ApiResponse(data=data, status_code=response.status_code)

        if data is None:
            message = f"Unreadable response from API (HTTP {response.status_code})"
        else:
            message = self._error_message(data, response.status_code)

        if self._logger is not None:
            self._logger.log_error(
                self.COMPONENT,
                message,
                request_url=url,
                response_status_code=response.status_code,
            )

        raise ApiError(
            code="api_error",
            message=message,
            data=data,
            status_code=response.status_code,
            details={"path": path},
        )

    def _network_failure(
        self,
        code: str,
        message: str,
        url: str,
        error: Exception,
    ) -> NetworkError:
        if self._logger is not None:
            self._logger.log_error(self.COMPONENT, message, error=error, request_url=url)
        return NetworkError(code=code, message=message, details={"url": url})

    @staticmethod
    def _error_message(data: Any, status_code: int) -> str:
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return f"API request failed with HTTP {status_code}"

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
