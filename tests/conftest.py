"""Pytest fixtures for compliance-scoring tests."""

import pytest
from prometheus_client import CollectorRegistry

from compliance_scoring.config.settings import Settings
from compliance_scoring.observability.metrics import MetricsCollector
from compliance_scoring.scoring.schemas import ComplianceGap, RiskItem


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing."""
    return Settings(environment="development", log_level="DEBUG")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> MetricsCollector:
    """Metrics collector on an isolated registry."""
    return MetricsCollector(registry=registry)


@pytest.fixture
def governance_gap() -> ComplianceGap:
    """A critical gap with no recorded gap size."""
    return ComplianceGap(
        id="gap-1",
        category="Governance",
        title="No board-level risk oversight",
        description="The board does not review compliance risk.",
        severity="CRITICAL",
        priority="HIGH",
    )


@pytest.fixture
def sample_gaps() -> list[ComplianceGap]:
    """Gaps spanning several categories and severities."""
    return [
        ComplianceGap(
            id="gap-1",
            category="Governance",
            title="No board-level risk oversight",
            severity="CRITICAL",
            gap_size=80,
        ),
        ComplianceGap(
            id="gap-2",
            category="Documentation",
            title="Missing AML policy",
            description="Customer due diligence is not documented.",
            severity="HIGH",
            gap_size=60,
        ),
        ComplianceGap(
            id="gap-3",
            category="Regulatory Compliance",
            title="Sanctions screening not automated",
            severity="MEDIUM",
        ),
    ]


@pytest.fixture
def sample_risks() -> list[RiskItem]:
    """Risks across three categories with mixed control effectiveness."""
    return [
        RiskItem(
            id="risk-1",
            category="REGULATORY",
            title="Regulatory fines",
            risk_level="HIGH",
            likelihood="LIKELY",
            impact="MAJOR",
            control_effectiveness=50,
        ),
        RiskItem(
            id="risk-2",
            category="OPERATIONAL",
            title="Manual onboarding errors",
            risk_level="MEDIUM",
            likelihood="POSSIBLE",
            impact="MODERATE",
        ),
        RiskItem(
            id="risk-3",
            category="GEOGRAPHIC",
            title="High-risk jurisdiction exposure",
            risk_level="CRITICAL",
            likelihood="UNLIKELY",
            impact="CATASTROPHIC",
            control_effectiveness=25,
        ),
    ]
