"""
Rate Limiter module for domain availability checks.

The registrar only allows one availability check per cooldown window. The
window is enforced locally from the persisted timestamp of the last
successful check, and its length is taken from the rate-limit metadata the
server returns with every check (10 seconds until the server has said
otherwise).
"""

import math
import time
from typing import Any, Callable, Optional

from .audit_logger import AuditLogger
from .enums import CooldownState
from .exceptions import RateLimitError
from .models import CooldownStatus, LocalState
from .state_store import StateStore


DEFAULT_COOLDOWN_SECONDS = 10


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class DomainCheckRateLimiter:
    """
    Two-state cooldown for availability checks: Allowed or Cooling.

    Only successful checks are charged: ``record_success`` must be called after
    a check response arrives, and nothing is recorded for failed attempts.
    """

    COMPONENT = "rate_limiter"

    def __init__(
        self,
        state_store: StateStore,
        clock: Callable[[], int] = now_ms,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the rate limiter.

        Args:
            state_store: Store holding lastDomainCheck / domainCheckCooldown
            clock: Returns the current time in epoch milliseconds
            logger: Optional logger
        """
        self._state_store = state_store
        self._clock = clock
        self._logger = logger

    def status(self) -> CooldownStatus:
        """Evaluate the cooldown against the stored state."""
        state = self._state_store.read()
        last_check = state.last_domain_check or 0
        cooldown_ms = (state.domain_check_cooldown or DEFAULT_COOLDOWN_SECONDS) * 1000
        elapsed = self._clock() - last_check

        if elapsed < cooldown_ms:
            time_left = math.ceil((cooldown_ms - elapsed) / 1000)
            return CooldownStatus(state=CooldownState.COOLING, time_left=time_left)
        return CooldownStatus(state=CooldownState.ALLOWED)

    def ensure_allowed(self) -> None:
        """
        Raises:
            RateLimitError: If a check is still cooling down
        """
        status = self.status()
        if status.allowed:
            return
        if self._logger is not None:
            self._logger.info(
                self.COMPONENT,
                "Domain check rejected during cooldown",
                {"time_left": status.time_left},
            )
        raise RateLimitError(status.time_left)

    def record_success(self, response_data: Any) -> LocalState:
        """
        Charge a successful check and adopt the server's cooldown window.

        Args:
            response_data: Decoded body of the check response

        Returns:
            The updated state
        """
        checked_at = self._clock()
        cooldown = parse_cooldown(response_data)

        def mutate(state: LocalState) -> None:
            state.last_domain_check = checked_at
            if cooldown is not None:
                state.domain_check_cooldown = cooldown

        return self._state_store.update(mutate)


def parse_cooldown(response_data: Any) -> Optional[float]:
    """
    Extract ``limits.TTL`` (seconds) from a check response.

    The API sends the TTL as a string; anything that is not a positive number
    is ignored.
    """
    if not isinstance(response_data, dict):
        return None
    limits = response_data.get("limits")
    if not isinstance(limits, dict):
        return None
    try:
        ttl = float(limits.get("TTL"))
    except (TypeError, ValueError):
        return None
    if not math.isfinite(ttl) or ttl <= 0:
        return None
    return int(ttl) if ttl.is_integer() else ttl
