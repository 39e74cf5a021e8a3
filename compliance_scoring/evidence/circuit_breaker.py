"""Circuit breaker gating the evidence classification pipeline.

Same CLOSED → OPEN → HALF_OPEN → CLOSED state machine as a call-wrapping
breaker, but split into explicit ``allow_request`` / ``record_success`` /
``record_failure`` steps because the classifier decides what counts as a
failure only after the whole pipeline has run (an AI failure that was
recovered by heuristics still counts).

All state transitions happen under a lock, so one breaker can be shared by
concurrent asyncio tasks or threads without losing failure counts.

Usage:
    breaker = CircuitBreaker(failure_threshold=5, recovery_timeout=300.0)
    if not breaker.allow_request():
        return fallback
    try:
        ...
    except Exception:
        breaker.record_failure()
    else:
        breaker.record_success()
"""

import enum
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class CircuitState(enum.Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class CircuitBreakerState:
    """Point-in-time view of a breaker.

    ``last_failure_time`` is in the breaker's clock (monotonic seconds by
    default), None until the first failure.
    """

    failure_count: int
    last_failure_time: float | None
    state: CircuitState


class CircuitBreaker:
    """Consecutive-failure circuit breaker with a single recovery probe.

    - CLOSED: Requests allowed. Consecutive failures tracked.
    - OPEN: Requests refused. The first request after recovery_timeout
      moves the breaker to HALF_OPEN and becomes the probe.
    - HALF_OPEN: Exactly one probe in flight. Success → CLOSED,
      failure → OPEN (failure count keeps accumulating).

    Args:
        failure_threshold: Consecutive failures before opening circuit.
        recovery_timeout: Seconds before attempting a recovery probe.
        name: Optional name for logging.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 300.0,
        name: str = "evidence_classifier",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._failure_threshold = failure_threshold
        self._recovery_timeout = recovery_timeout
        self._name = name
        self._clock = clock
        self._lock = threading.Lock()
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._last_failure_time: float | None = None
        self._probe_in_flight = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> CircuitState:
        """Current circuit state (does not trigger the OPEN → HALF_OPEN move)."""
        return self._state

    @property
    def consecutive_failures(self) -> int:
        """Number of consecutive failures."""
        return self._consecutive_failures

    def snapshot(self) -> CircuitBreakerState:
        """Return a consistent copy of the breaker's state."""
        with self._lock:
            return CircuitBreakerState(
                failure_count=self._consecutive_failures,
                last_failure_time=self._last_failure_time,
                state=self._state,
            )

    def allow_request(self) -> bool:
        """Decide whether a request may proceed, claiming the probe slot if needed.

        Returns:
            False while OPEN and cooling down, or while another HALF_OPEN
            probe is in flight. True otherwise.
        """
        with self._lock:
            if self._state == CircuitState.CLOSED:
                return True

            if self._state == CircuitState.OPEN:
                elapsed = self._clock() - (self._last_failure_time or 0.0)
                if elapsed < self._recovery_timeout:
                    return False
                self._state = CircuitState.HALF_OPEN
                self._probe_in_flight = True
                logger.info(
                    "Circuit breaker %s: OPEN → HALF_OPEN (recovery probe)",
                    self._name,
                )
                return True

            # HALF_OPEN
            if self._probe_in_flight:
                return False
            self._probe_in_flight = True
            return True

    def release_recovery_slot(self) -> None:
        """Give back a claimed HALF_OPEN slot without recording an outcome.

        For a request that is cancelled before it can report success or
        failure. The breaker stays HALF_OPEN and admits the next request.
        No-op in any other state.
        """
        with self._lock:
            if self._state == CircuitState.HALF_OPEN and self._probe_in_flight:
                self._probe_in_flight = False
                logger.info(
                    "Circuit breaker %s: recovery attempt cancelled, slot released",
                    self._name,
                )

    def record_success(self) -> None:
        """Reset to CLOSED with a zero failure count."""
        with self._lock:
            if self._state != CircuitState.CLOSED:
                logger.info(
                    "Circuit breaker %s: %s → CLOSED (request succeeded)",
                    self._name,
                    self._state.name,
                )
            self._state = CircuitState.CLOSED
            self._consecutive_failures = 0
            self._last_failure_time = None
            self._probe_in_flight = False

    def record_failure(self) -> None:
        """Record a failure and potentially open the circuit."""
        with self._lock:
            self._consecutive_failures += 1
            self._last_failure_time = self._clock()
            self._probe_in_flight = False

            if self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.OPEN
                logger.warning(
                    "Circuit breaker %s: HALF_OPEN → OPEN (probe failed)",
                    self._name,
                )
            elif (
                self._state == CircuitState.CLOSED
                and self._consecutive_failures >= self._failure_threshold
            ):
                self._state = CircuitState.OPEN
                logger.warning(
                    "Circuit breaker %s: CLOSED → OPEN after %d failures",
                    self._name,
                    self._consecutive_failures,
                )
