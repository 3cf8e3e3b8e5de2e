"""
Exception classes for the swinelink client.

All exceptions inherit from SwinelinkError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Any, Optional


class SwinelinkError(Exception):
    """Base exception for all swinelink errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(SwinelinkError):
    """Raised when caller input is rejected before any network call."""

    pass


class DomainValidationError(ValidationError):
    """Raised when a domain name is malformed. The message always mentions 'Domain'."""

    def __init__(self, reason: str, message: str, details: Optional[dict] = None) -> None:
        self.reason = reason
        super().__init__(code=reason, message=message, details=details)


class ConfigurationError(SwinelinkError):
    """Raised when required configuration (API credentials) is missing."""

    pass


class PersistenceError(SwinelinkError):
    """Raised when the local state file cannot be read or written."""

    pass


class RequestError(SwinelinkError):
    """
    Base for failures of an API operation.

    ``data`` holds the payload a front end should show: the upstream response
    body when one was received, or a locally built ``{status, message}`` /
    ``{error}`` object otherwise.
    """

    def __init__(
        self,
        code: str,
        message: str,
        data: Any = None,
        status_code: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> None:
        super().__init__(code=code, message=message, details=details)
        self.data = data if data is not None else {"error": message}
        self.status_code = status_code

    @property
    def response(self) -> dict:
        """Error detail in the ``{"data": ...}`` shape shared with successful responses."""
        return {"data": self.data}


class RateLimitError(RequestError):
    """Raised when a domain check is attempted inside the cooldown window."""

    def __init__(self, time_left: int) -> None:
        message = f"Please wait {time_left} seconds before checking another domain."
        super().__init__(
            code="cooldown",
            message=message,
            data={"status": "ERROR", "message": message},
            details={"time_left": time_left},
        )
        self.time_left = time_left


class ApiError(RequestError):
    """Raised when the upstream API answers with an error status or an unreadable body."""

    pass


class NetworkError(RequestError):
    """Raised when no response was received (connection failure, timeout)."""

    pass
