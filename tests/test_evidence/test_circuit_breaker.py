"""Tests for the evidence pipeline circuit breaker."""

from concurrent.futures import ThreadPoolExecutor

from compliance_scoring.evidence.circuit_breaker import CircuitBreaker, CircuitState


def _trip(breaker: CircuitBreaker, failures: int = 5) -> None:
    for _ in range(failures):
        breaker.record_failure()


class TestClosedState:
    def test_starts_closed(self, breaker: CircuitBreaker) -> None:
        assert breaker.state == CircuitState.CLOSED
        assert breaker.allow_request() is True

    def test_stays_closed_below_threshold(self, breaker: CircuitBreaker) -> None:
        _trip(breaker, 4)
        assert breaker.state == CircuitState.CLOSED
        assert breaker.consecutive_failures == 4
        assert breaker.allow_request() is True

    def test_success_resets_failure_count(self, breaker: CircuitBreaker) -> None:
        _trip(breaker, 4)
        breaker.record_success()
        assert breaker.consecutive_failures == 0

        # Four more failures are not enough to open
        _trip(breaker, 4)
        assert breaker.state == CircuitState.CLOSED


class TestOpenState:
    def test_opens_at_threshold(self, breaker: CircuitBreaker, clock) -> None:
        _trip(breaker)
        snapshot = breaker.snapshot()
        assert snapshot.state == CircuitState.OPEN
        assert snapshot.failure_count == 5
        assert snapshot.last_failure_time == clock.now

    def test_refuses_during_cool_down(self, breaker: CircuitBreaker, clock) -> None:
        _trip(breaker)
        clock.advance(299)
        assert breaker.allow_request() is False
        assert breaker.state == CircuitState.OPEN


class TestHalfOpenRecovery:
    def test_probe_after_cool_down(self, breaker: CircuitBreaker, clock) -> None:
        _trip(breaker)
        clock.advance(300)
        assert breaker.allow_request() is True
        assert breaker.state == CircuitState.HALF_OPEN

    def test_single_probe_in_flight(self, breaker: CircuitBreaker, clock) -> None:
        _trip(breaker)
        clock.advance(300)
        assert breaker.allow_request() is True
        assert breaker.allow_request() is False

    def test_probe_success_closes(self, breaker: CircuitBreaker, clock) -> None:
        _trip(breaker)
        clock.advance(300)
        breaker.allow_request()
        breaker.record_success()

        snapshot = breaker.snapshot()
        assert snapshot.state == CircuitState.CLOSED
        assert snapshot.failure_count == 0
        assert snapshot.last_failure_time is None
        assert breaker.allow_request() is True

    def test_probe_failure_reopens(self, breaker: CircuitBreaker, clock) -> None:
        _trip(breaker)
        clock.advance(300)
        breaker.allow_request()
        breaker.record_failure()

        snapshot = breaker.snapshot()
        assert snapshot.state == CircuitState.OPEN
        assert snapshot.failure_count == 6
        assert snapshot.last_failure_time == clock.now

        # Cool-down restarts from the failed probe
        clock.advance(299)
        assert breaker.allow_request() is False
        clock.advance(1)
        assert breaker.allow_request() is True


    def test_released_slot_admits_next_request(self, breaker: CircuitBreaker, clock) -> None:
        _trip(breaker)
        clock.advance(300)
        assert breaker.allow_request() is True

        breaker.release_recovery_slot()

        assert breaker.state == CircuitState.HALF_OPEN
        assert breaker.consecutive_failures == 5
        assert breaker.allow_request() is True
        assert breaker.allow_request() is False

    def test_release_when_closed_is_noop(self, breaker: CircuitBreaker) -> None:
        breaker.release_recovery_slot()
        assert breaker.state == CircuitState.CLOSED
        assert breaker.allow_request() is True


class TestConcurrency:
    def test_no_lost_failures_across_threads(self) -> None:
        breaker = CircuitBreaker(failure_threshold=10_000)

        def record(_: int) -> None:
            for _ in range(250):
                breaker.record_failure()

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(record, range(8)))

        assert breaker.consecutive_failures == 2000
