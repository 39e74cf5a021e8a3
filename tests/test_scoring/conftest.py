"""Pytest fixtures for scoring tests."""

import pytest

from compliance_scoring.scoring.calculator import ScoreCalculator
from compliance_scoring.scoring.config import ScoringConfig
from compliance_scoring.scoring.schemas import ComplianceGap, RiskCategory, RiskItem


@pytest.fixture
def scoring_config() -> ScoringConfig:
    """Config with the stock weights and thresholds, independent of env."""
    return ScoringConfig(
        weight_compliance=0.4,
        weight_risk=0.5,
        weight_maturity=0.0,
        weight_documentation=0.1,
        threshold_low=30,
        threshold_medium=60,
        threshold_high=80,
    )


@pytest.fixture
def calculator(scoring_config: ScoringConfig) -> ScoreCalculator:
    return ScoreCalculator(scoring_config)


@pytest.fixture
def neutral_categories() -> dict[RiskCategory, int]:
    """Every category at the neutral 50."""
    return {category: 50 for category in RiskCategory}


def make_gap(**overrides) -> ComplianceGap:
    fields = {
        "id": "gap",
        "category": "Operations",
        "title": "Gap",
        "description": "",
        "severity": "MEDIUM",
    }
    fields.update(overrides)
    return ComplianceGap(**fields)


def make_risk(**overrides) -> RiskItem:
    fields = {
        "id": "risk",
        "category": "OPERATIONAL",
        "title": "Risk",
        "risk_level": "MEDIUM",
        "likelihood": "POSSIBLE",
        "impact": "MODERATE",
    }
    fields.update(overrides)
    return RiskItem(**fields)
