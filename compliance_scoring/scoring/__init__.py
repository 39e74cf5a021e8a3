"""Deterministic compliance and risk scoring.

Turns the gaps and risks found during questionnaire analysis into an overall
score, per-category scores, a composite risk index, trend analysis and
narrative insights.

Usage:
    from compliance_scoring.scoring import ScoreCalculator

    calculator = ScoreCalculator()
    overall = calculator.calculate_overall_score(gaps, risks)
    by_category = calculator.calculate_category_scores(gaps, risks)
    insights = calculator.generate_scoring_insights(overall, by_category, gaps, risks)
"""

from compliance_scoring.scoring.calculator import (
    ScoreCalculator,
    get_score_level,
    map_gap_category,
    round_half_up,
)
from compliance_scoring.scoring.config import ScoringConfig
from compliance_scoring.scoring.schemas import (
    ComplianceGap,
    Impact,
    Likelihood,
    RiskCategory,
    RiskItem,
    RiskLevel,
    ScoreBreakdown,
    ScoringInsights,
    ScoringThresholds,
    ScoringWeights,
    Severity,
    TrendAnalysis,
)

__all__ = [
    "ComplianceGap",
    "Impact",
    "Likelihood",
    "RiskCategory",
    "RiskItem",
    "RiskLevel",
    "ScoreBreakdown",
    "ScoreCalculator",
    "ScoringConfig",
    "ScoringInsights",
    "ScoringThresholds",
    "ScoringWeights",
    "Severity",
    "TrendAnalysis",
    "get_score_level",
    "map_gap_category",
    "round_half_up",
]
