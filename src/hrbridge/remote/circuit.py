"""Circuit breaker for workforce API token acquisition.

Repeated failures at the token endpoint almost always mean bad credentials
or an identity provider outage. Once the breaker opens, callers fail fast
instead of sending a token request per inbound employee.
"""

import time
from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from hrbridge.core.logging import get_logger

logger = get_logger(__name__)


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation, token requests pass through
    OPEN = "open"  # Tripped, token requests fail fast
    HALF_OPEN = "half_open"  # One trial request allowed


class CircuitBreakerConfig(BaseModel):
    """Configuration for circuit breaker behavior."""

    failure_threshold: int = Field(default=5, ge=1, description="Consecutive failures before opening")
    reset_seconds: float = Field(default=60.0, gt=0, description="Time before a trial request")


class AuthCircuitBreaker:
    """Circuit breaker guarding the OAuth2 token endpoint.

    States:
    - CLOSED: token requests pass through, consecutive failures are counted
    - OPEN: token requests are refused until ``reset_seconds`` elapse
    - HALF_OPEN: a single trial request is allowed; success closes the
      circuit, failure reopens it

    Usage:
        breaker = AuthCircuitBreaker(CircuitBreakerConfig(failure_threshold=3))

        if not breaker.can_execute():
            raise AuthenticationError("Authentication circuit open")
        try:
            token = await fetch()
            breaker.record_success()
        except AuthenticationError:
            breaker.record_failure()
            raise
    """

    def __init__(
        self,
        config: CircuitBreakerConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize circuit breaker.

        Args:
            config: Circuit breaker configuration.
            clock: Monotonic time source in seconds.
        """
        self.config = config or CircuitBreakerConfig()
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: float | None = None
        self._trial_in_flight = False

    @property
    def state(self) -> CircuitState:
        """Get current circuit state."""
        self._check_timeout()
        return self._state

    @property
    def is_open(self) -> bool:
        return self.state == CircuitState.OPEN

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def seconds_until_retry(self) -> float:
        """Seconds left before a trial request is allowed (0 if not open)."""
        if self.state != CircuitState.OPEN or self._opened_at is None:
            return 0.0
        return max(0.0, self.config.reset_seconds - (self._clock() - self._opened_at))

    def can_execute(self) -> bool:
        """Check whether a token request may be sent now.

        In HALF_OPEN this reserves the single trial slot.
        """
        state = self.state

        if state == CircuitState.CLOSED:
            return True

        if state == CircuitState.OPEN:
            return False

        if self._trial_in_flight:
            return False
        self._trial_in_flight = True
        return True

    def record_success(self) -> None:
        """Record a successful token request."""
        if self._state != CircuitState.CLOSED:
            logger.info("auth_circuit_closed", failure_count=self._failure_count)
        self._close()

    def record_failure(self) -> None:
        """Record a failed token request."""
        self._failure_count += 1

        if self._state == CircuitState.HALF_OPEN:
            self._open()
            logger.warning("auth_circuit_reopened", failure_count=self._failure_count)
        elif (
            self._state == CircuitState.CLOSED
            and self._failure_count >= self.config.failure_threshold
        ):
            self._open()
            logger.warning(
                "auth_circuit_opened",
                failure_count=self._failure_count,
                reset_seconds=self.config.reset_seconds,
            )

    def reset(self) -> None:
        """Reset circuit to closed state."""
        self._close()
        logger.info("auth_circuit_reset")

    def _check_timeout(self) -> None:
        if self._state != CircuitState.OPEN or self._opened_at is None:
            return

        if self._clock() - self._opened_at >= self.config.reset_seconds:
            self._state = CircuitState.HALF_OPEN
            self._trial_in_flight = False
            logger.info("auth_circuit_half_open")

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()
        self._trial_in_flight = False

    def _close(self) -> None:
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at = None
        self._trial_in_flight = False

    def get_status(self) -> dict[str, Any]:
        """Get circuit breaker status."""
        return {
            "state": self.state.value,
            "failure_count": self._failure_count,
            "seconds_until_retry": self.seconds_until_retry(),
        }
