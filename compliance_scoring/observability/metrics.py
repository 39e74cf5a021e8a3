"""
Prometheus metrics for the scoring engine and evidence classification.

Defines and exposes metrics for:
- Classifications by tier and resolution path
- Classification cache hit rates
- AI classifier failures and latency
- Circuit breaker state
- Scores computed

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

from compliance_scoring.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)

# Gauge encoding for circuit breaker state
CIRCUIT_STATE_VALUES = {"closed": 0, "half_open": 1, "open": 2}


class MetricsCollector:
    """
    Prometheus metrics collector for compliance scoring.

    Usage:
        metrics = MetricsCollector()
        metrics.start_server()

        metrics.record_classification(tier="TIER_2", path="heuristic", latency=0.02)
        metrics.record_cache_lookup(hit=True)

    Args:
        registry: Registry to register metrics with. Defaults to the global
            prometheus REGISTRY; pass a fresh CollectorRegistry in tests.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        self._registry = registry or REGISTRY

        # Classification counters
        self.classifications = Counter(
            "compliance_scoring_classifications_total",
            "Total documents classified",
            ["tier", "path"],  # path: ai, heuristic, fallback, circuit_open
            registry=self._registry,
        )

        self.classification_cache_hits = Counter(
            "compliance_scoring_classification_cache_hits_total",
            "Total classification cache hits",
            registry=self._registry,
        )

        self.classification_cache_misses = Counter(
            "compliance_scoring_classification_cache_misses_total",
            "Total classification cache misses",
            registry=self._registry,
        )

        self.ai_failures = Counter(
            "compliance_scoring_ai_failures_total",
            "Total AI classifier failures",
            ["error_type"],
            registry=self._registry,
        )

        # Latency histograms
        self.classification_latency = Histogram(
            "compliance_scoring_classification_latency_seconds",
            "Time to classify a document end to end",
            ["path"],
            buckets=LATENCY_BUCKETS,
            registry=self._registry,
        )

        # Circuit breaker
        self.circuit_state = Gauge(
            "compliance_scoring_circuit_state",
            "Circuit breaker state (0=closed, 1=half_open, 2=open)",
            ["breaker"],
            registry=self._registry,
        )

        # Scoring
        self.scores_computed = Counter(
            "compliance_scoring_scores_computed_total",
            "Total overall scores computed",
            ["level"],
            registry=self._registry,
        )

        logger.info("Prometheus metrics initialized")

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=self._registry)
        logger.info("Prometheus metrics server started on port %d", port)

    # Convenience methods

    def record_classification(
        self,
        tier: str,
        path: str,
        latency: float | None = None,
    ) -> None:
        """
        Record a completed classification.

        Args:
            tier: Resulting evidence tier (TIER_0, TIER_1, TIER_2)
            path: How the result was produced (ai, heuristic, fallback, circuit_open)
            latency: Optional end-to-end latency in seconds
        """
        self.classifications.labels(tier=tier, path=path).inc()
        if latency is not None:
            self.classification_latency.labels(path=path).observe(latency)

    def record_cache_lookup(self, hit: bool) -> None:
        """Record a classification cache hit or miss."""
        if hit:
            self.classification_cache_hits.inc()
        else:
            self.classification_cache_misses.inc()

    def record_ai_failure(self, error_type: str) -> None:
        """
        Record an AI classifier failure.

        Args:
            error_type: Exception class name or failure category
        """
        self.ai_failures.labels(error_type=error_type).inc()

    def set_circuit_state(self, breaker: str, state: str) -> None:
        """
        Set circuit breaker state gauge.

        Args:
            breaker: Breaker name
            state: State value (closed, half_open, open)
        """
        self.circuit_state.labels(breaker=breaker).set(
            CIRCUIT_STATE_VALUES.get(state, 0)
        )

    def record_score(self, level: str) -> None:
        """Record an overall score computation by qualitative level."""
        self.scores_computed.labels(level=level).inc()


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
