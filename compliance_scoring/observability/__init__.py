"""Observability layer - logging and metrics."""

from compliance_scoring.observability.logging import get_logger, setup_logging
from compliance_scoring.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "get_logger", "MetricsCollector", "get_metrics"]
