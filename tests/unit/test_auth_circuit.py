"""Unit tests for the token endpoint circuit breaker."""

import pytest
from pydantic import ValidationError

from hrbridge.remote.circuit import AuthCircuitBreaker, CircuitBreakerConfig, CircuitState


@pytest.fixture
def breaker(clock) -> AuthCircuitBreaker:
    return AuthCircuitBreaker(
        CircuitBreakerConfig(failure_threshold=3, reset_seconds=60), clock=clock
    )


class TestCircuitBreakerConfig:
    """Tests for CircuitBreakerConfig."""

    def test_defaults(self):
        config = CircuitBreakerConfig()

        assert config.failure_threshold == 5
        assert config.reset_seconds == 60.0

    def test_threshold_must_be_positive(self):
        with pytest.raises(ValidationError):
            CircuitBreakerConfig(failure_threshold=0)


class TestAuthCircuitBreaker:
    """Tests for AuthCircuitBreaker state transitions."""

    def test_starts_closed(self, breaker):
        assert breaker.state == CircuitState.CLOSED
        assert breaker.can_execute()

    def test_opens_at_threshold(self, breaker):
        breaker.record_failure()
        breaker.record_failure()
        assert breaker.state == CircuitState.CLOSED

        breaker.record_failure()

        assert breaker.is_open
        assert not breaker.can_execute()

    def test_success_resets_failure_count(self, breaker):
        breaker.record_failure()
        breaker.record_failure()

        breaker.record_success()
        breaker.record_failure()

        assert breaker.state == CircuitState.CLOSED
        assert breaker.failure_count == 1

    def test_half_open_after_reset_period(self, breaker, clock):
        for _ in range(3):
            breaker.record_failure()

        clock.advance(59)
        assert breaker.is_open
        assert breaker.seconds_until_retry() == pytest.approx(1)

        clock.advance(1)
        assert breaker.state == CircuitState.HALF_OPEN

    def test_half_open_allows_single_trial(self, breaker, clock):
        for _ in range(3):
            breaker.record_failure()
        clock.advance(60)

        assert breaker.can_execute()
        assert not breaker.can_execute()

    def test_trial_success_closes(self, breaker, clock):
        for _ in range(3):
            breaker.record_failure()
        clock.advance(60)
        breaker.can_execute()

        breaker.record_success()

        assert breaker.state == CircuitState.CLOSED
        assert breaker.failure_count == 0

    def test_trial_failure_reopens(self, breaker, clock):
        for _ in range(3):
            breaker.record_failure()
        clock.advance(60)
        breaker.can_execute()

        breaker.record_failure()

        assert breaker.is_open
        assert breaker.seconds_until_retry() == pytest.approx(60)

    def test_reset(self, breaker):
        for _ in range(3):
            breaker.record_failure()

        breaker.reset()

        assert breaker.get_status() == {
            "state": "closed",
            "failure_count": 0,
            "seconds_until_retry": 0.0,
        }
