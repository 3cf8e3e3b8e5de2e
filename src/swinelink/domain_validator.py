"""
Domain validation and normalization module.

Checks domain names against the RFC 1035 / RFC 1123 host name rules before
any request is sent, and offers IDNA normalization for Unicode input.
"""

import re
from dataclasses import dataclass
from typing import Any, Optional

import idna

from .enums import DomainValidationErrorCode
from .exceptions import DomainValidationError


MAX_DOMAIN_LENGTH = 253
MIN_DOMAIN_LENGTH = 3
MAX_LABEL_LENGTH = 63
IDN_PREFIX = "xn--"

LABEL_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")
TLD_LETTERS_PATTERN = re.compile(r"^[A-Za-z]+$")


@dataclass
class DomainValidationResult:
    """Result of domain validation operation."""

    valid: bool
    error: Optional[DomainValidationError] = None


class DomainValidator:
    """
    Validates domain names.

    Rules are checked in a fixed order and the first failure wins:
    non-empty string, total length, label count, label length,
    label characters, hyphen placement, TLD shape.
    """

    def check(self, domain: Any) -> DomainValidationResult:
        """
        Validate a domain without raising.

        Args:
            domain: Candidate domain name (trailing dot allowed)

        Returns:
            DomainValidationResult with the first failure, if any
        """
        try:
            self.validate(domain)
        except DomainValidationError as e:
            return DomainValidationResult(valid=False, error=e)
        return DomainValidationResult(valid=True)

    def validate(self, domain: Any) -> None:
        """
        Validate a domain name.

        Args:
            domain: Candidate domain name (trailing dot allowed)

        Raises:
            DomainValidationError: If any rule is violated
        """
        if not isinstance(domain, str) or not domain:
            raise DomainValidationError(
                DomainValidationErrorCode.EMPTY_INPUT.value,
                "Domain must be a non-empty string",
                {"raw_input": domain},
            )

        normalized = domain[:-1] if domain.endswith(".") else domain

        if len(normalized) > MAX_DOMAIN_LENGTH:
            raise DomainValidationError(
                DomainValidationErrorCode.TOO_LONG.value,
                f"Domain name too long (max {MAX_DOMAIN_LENGTH} characters)",
                {"length": len(normalized)},
            )

        if len(normalized) < MIN_DOMAIN_LENGTH:
            raise DomainValidationError(
                DomainValidationErrorCode.TOO_SHORT.value,
                "Domain name too short (minimum format: a.b)",
                {"length": len(normalized)},
            )

        labels = normalized.split(".")
        if len(labels) < 2:
            raise DomainValidationError(
                DomainValidationErrorCode.TOO_FEW_LABELS.value,
                "Domain must have at least 2 parts (domain.tld)",
                {"raw_input": domain},
            )

        for index, label in enumerate(labels):
            self._validate_label(label, is_tld=index == len(labels) - 1)

    def _validate_label(self, label: str, is_tld: bool) -> None:
        if not label:
            raise DomainValidationError(
                DomainValidationErrorCode.EMPTY_LABEL.value,
                "Domain labels cannot be empty",
            )
        if len(label) > MAX_LABEL_LENGTH:
            raise DomainValidationError(
                DomainValidationErrorCode.LABEL_TOO_LONG.value,
                f'Domain label too long: "{label}" (max {MAX_LABEL_LENGTH} characters)',
                {"label": label},
            )
        if not LABEL_PATTERN.match(label):
            raise DomainValidationError(
                DomainValidationErrorCode.FORBIDDEN_CHARS.value,
                f'Invalid characters in Domain label: "{label}"',
                {"label": label},
            )
        if label.startswith("-") or label.endswith("-"):
            raise DomainValidationError(
                DomainValidationErrorCode.HYPHEN_EDGE.value,
                f'Domain labels cannot start or end with hyphen: "{label}"',
                {"label": label},
            )
        if not is_tld:
            return
        if len(label) < 2:
            raise DomainValidationError(
                DomainValidationErrorCode.TLD_TOO_SHORT.value,
                f'Domain TLD too short: "{label}" (minimum 2 characters)',
                {"tld": label},
            )
        if not label.lower().startswith(IDN_PREFIX) and not TLD_LETTERS_PATTERN.match(label):
            raise DomainValidationError(
                DomainValidationErrorCode.INVALID_TLD.value,
                f'Domain TLD contains invalid characters: "{label}"',
                {"tld": label},
            )


_default_validator = DomainValidator()


def validate_domain(domain: Any) -> None:
    """Module-level shortcut for DomainValidator().validate()."""
    _default_validator.validate(domain)


def normalize_to_canonical(domain: str) -> str:
    """
    Convert domain to canonical form (stripped, lowercase, IDNA-encoded).

    Args:
        domain: Domain string to normalize

    Returns:
        Canonical ASCII form of the domain

    Raises:
        DomainValidationError: If IDNA encoding fails
    """
    domain_lower = domain.strip().lower()

    if all(ord(c) < 128 for c in domain_lower):
        return domain_lower

    trailing_dot = domain_lower.endswith(".")
    try:
        canonical = idna.encode(domain_lower.rstrip("."), uts46=True).decode("ascii")
    except idna.IDNAError as e:
        raise DomainValidationError(
            DomainValidationErrorCode.IDNA_ERROR.value,
            f"Domain IDNA encoding failed: {e}",
            {"domain": domain, "idna_error": str(e)},
        )
    return canonical + "." if trailing_dot else canonical
