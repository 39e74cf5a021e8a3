"""Deterministic risk and compliance scoring.

Turns the gaps and risks produced by questionnaire analysis into:
  - an overall 0-100 score (weighted compliance, risk, maturity and
    documentation components)
  - per-category scores for the six risk categories
  - a composite risk index blending both
  - trend analysis against previous scores
  - narrative insights for reports

The calculator is pure: no I/O, no randomness, no shared mutable state.
Safe to call concurrently from any number of callers.

Integer results use half-up rounding, not Python's round-half-to-even,
so that a component landing exactly on .5 always rounds the same way.
"""

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from enum import Enum

from compliance_scoring.scoring.config import ScoringConfig
from compliance_scoring.scoring.schemas import (
    ComplianceGap,
    RiskCategory,
    RiskItem,
    RiskLevel,
    ScoreBreakdown,
    ScoringInsights,
    ScoringThresholds,
    ScoringWeights,
    TrendAnalysis,
)

logger = logging.getLogger(__name__)

# ── Weight tables ─────────────────────────────────────────

# Overall compliance component: impact of one gap, scaled by gap size
GAP_SEVERITY_WEIGHTS = {"CRITICAL": 25, "HIGH": 15, "MEDIUM": 8, "LOW": 3}
DEFAULT_GAP_SEVERITY_WEIGHT = 5

# Overall risk component: base weight before likelihood/impact/controls
RISK_LEVEL_WEIGHTS = {"CRITICAL": 25, "HIGH": 15, "MEDIUM": 8, "LOW": 3}
DEFAULT_RISK_LEVEL_WEIGHT = 5

LIKELIHOOD_MULTIPLIERS = {
    "CERTAIN": 1.0,
    "LIKELY": 0.8,
    "POSSIBLE": 0.6,
    "UNLIKELY": 0.4,
    "RARE": 0.2,
}
DEFAULT_LIKELIHOOD_MULTIPLIER = 0.6

IMPACT_MULTIPLIERS = {
    "CATASTROPHIC": 1.0,
    "MAJOR": 0.8,
    "MODERATE": 0.6,
    "MINOR": 0.4,
    "NEGLIGIBLE": 0.2,
}
DEFAULT_IMPACT_MULTIPLIER = 0.6

# Per-item maximum impact for the compliance and risk components
MAX_ITEM_IMPACT = 25

DOCUMENTATION_SEVERITY_WEIGHTS = {"CRITICAL": 20, "HIGH": 12, "MEDIUM": 6, "LOW": 2}
DEFAULT_DOCUMENTATION_SEVERITY_WEIGHT = 6
MAX_DOCUMENTATION_IMPACT = 20

# Category scores use a 0-100 weight per item
CATEGORY_ITEM_WEIGHTS = {"CRITICAL": 100, "HIGH": 75, "MEDIUM": 50, "LOW": 25}
DEFAULT_CATEGORY_ITEM_WEIGHT = 50

DEFAULT_CATEGORY_WEIGHTS: dict[RiskCategory, float] = {
    RiskCategory.REGULATORY: 0.25,
    RiskCategory.OPERATIONAL: 0.20,
    RiskCategory.GOVERNANCE: 0.15,
    RiskCategory.REPUTATIONAL: 0.15,
    RiskCategory.TRANSACTION: 0.15,
    RiskCategory.GEOGRAPHIC: 0.10,
}

# Neutral / empty-input scores
NO_GAPS_COMPLIANCE_SCORE = 85
NO_RISKS_RISK_SCORE = 75
NO_DOCUMENTATION_GAPS_SCORE = 85
NEUTRAL_CATEGORY_SCORE = 50
NO_RISKS_CATEGORY_RISK_SCORE = 75
NO_GAPS_CATEGORY_GAP_SCORE = 80

# Maturity
MATURITY_BASE = 50
ASSUMED_CONTROL_EFFECTIVENESS = 70

# Absent gap size is scored as a full gap. This is a fail-closed policy:
# an unknown gap size must not make the gap free.
DEFAULT_GAP_SIZE = 100.0

# Composite index blend
COMPOSITE_OVERALL_SHARE = 0.6
COMPOSITE_CATEGORY_SHARE = 0.4

# Trend
TREND_STABLE_BAND = 2
TREND_FLIP_TOLERANCE = 1

# Gap category keywords → risk category, checked in order
GAP_CATEGORY_KEYWORDS: tuple[tuple[tuple[str, ...], RiskCategory], ...] = (
    (("governance",), RiskCategory.GOVERNANCE),
    (("regulatory", "compliance"), RiskCategory.REGULATORY),
    (("reputation", "brand"), RiskCategory.REPUTATIONAL),
    (("geographic", "jurisdiction"), RiskCategory.GEOGRAPHIC),
    (("transaction", "financial"), RiskCategory.TRANSACTION),
)

MAX_STRENGTHS = 3
MAX_WEAKNESSES = 3
MAX_GAP_PRIORITIES = 3
MAX_RISK_PRIORITIES = 2
MAX_PRIORITIES = 5
STRENGTH_THRESHOLD = 70
WEAKNESS_THRESHOLD = 50


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity."""
    return math.floor(value + 0.5)


def _key(value: object) -> object:
    """Normalize enum members to their raw value for table lookups."""
    return value.value if isinstance(value, Enum) else value


def _sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def _clamp(value: float, low: float = 0, high: float = 100) -> float:
    return min(high, max(low, value))


def _gap_factor(gap: ComplianceGap) -> float:
    gap_size = gap.gap_size if gap.gap_size is not None else DEFAULT_GAP_SIZE
    return gap_size / 100


def _control_reduction(risk: RiskItem) -> float:
    return (risk.control_effectiveness or 0) / 100


def map_gap_category(category: str) -> RiskCategory:
    """Map a free-text gap category onto one of the six risk categories.

    Unmatched categories fall into OPERATIONAL.
    """
    category_lower = category.lower()
    for keywords, risk_category in GAP_CATEGORY_KEYWORDS:
        if any(keyword in category_lower for keyword in keywords):
            return risk_category
    return RiskCategory.OPERATIONAL


def get_score_level(score: float) -> str:
    """Qualitative label for an overall score."""
    if score >= 80:
        return "Strong"
    if score >= 60:
        return "Good"
    if score >= 40:
        return "Fair"
    if score >= 20:
        return "Poor"
    return "Critical"


class ScoreCalculator:
    """Weighted scoring of compliance gaps and risks.

    Args:
        config: Scoring configuration supplying default weights and
            thresholds. Defaults to ScoringConfig().
    """

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self._config = config or ScoringConfig()

    @property
    def default_weights(self) -> ScoringWeights:
        return self._config.weights

    @property
    def thresholds(self) -> ScoringThresholds:
        return self._config.thresholds

    # ── Overall score ────────────────────────────────────

    def calculate_overall_score(
        self,
        gaps: Sequence[ComplianceGap],
        risks: Sequence[RiskItem],
        weights: ScoringWeights | None = None,
    ) -> int:
        """Combine the four component scores into a 0-100 overall score.

        Returns 0 when there is nothing to score.
        """
        if not gaps and not risks:
            return 0

        weights = weights or self.default_weights

        compliance = self.calculate_compliance_score(gaps)
        risk = self.calculate_risk_score(risks)
        maturity = self.calculate_maturity_score(gaps, risks)
        documentation = self.calculate_documentation_score(gaps)

        weighted = (
            compliance * weights.compliance
            + risk * weights.risk
            + maturity * weights.maturity
            + documentation * weights.documentation
        )

        logger.debug(
            "Component scores: compliance=%d risk=%d maturity=%d documentation=%d",
            compliance,
            risk,
            maturity,
            documentation,
        )
        return round_half_up(_clamp(weighted))

    def calculate_compliance_score(self, gaps: Sequence[ComplianceGap]) -> int:
        """Score gaps by severity, scaled by how large each gap is."""
        if not gaps:
            return NO_GAPS_COMPLIANCE_SCORE

        total_impact = sum(
            GAP_SEVERITY_WEIGHTS.get(_key(gap.severity), DEFAULT_GAP_SEVERITY_WEIGHT)
            * _gap_factor(gap)
            for gap in gaps
        )
        impact_ratio = min(1.0, total_impact / (len(gaps) * MAX_ITEM_IMPACT))
        return round_half_up(100 - impact_ratio * 100)

    def calculate_risk_score(self, risks: Sequence[RiskItem]) -> int:
        """Score risks by level x likelihood x impact, reduced by controls."""
        if not risks:
            return NO_RISKS_RISK_SCORE

        total_impact = 0.0
        for risk in risks:
            base = RISK_LEVEL_WEIGHTS.get(_key(risk.risk_level), DEFAULT_RISK_LEVEL_WEIGHT)
            likelihood = LIKELIHOOD_MULTIPLIERS.get(
                _key(risk.likelihood), DEFAULT_LIKELIHOOD_MULTIPLIER
            )
            impact = IMPACT_MULTIPLIERS.get(_key(risk.impact), DEFAULT_IMPACT_MULTIPLIER)
            total_impact += base * likelihood * impact * (1 - _control_reduction(risk))

        impact_ratio = min(1.0, total_impact / (len(risks) * MAX_ITEM_IMPACT))
        return round_half_up(100 - impact_ratio * 100)

    def calculate_maturity_score(
        self,
        gaps: Sequence[ComplianceGap],
        risks: Sequence[RiskItem],
    ) -> int:
        """Estimate organizational maturity from documentation gaps,
        control effectiveness, critical gap count and risk coverage.
        """
        score = MATURITY_BASE

        process_gaps = [
            gap
            for gap in gaps
            if "documentation" in gap.category.lower()
            or "process" in gap.category.lower()
            or "documented" in gap.description.lower()
        ]
        if not process_gaps:
            score += 15
        elif len(process_gaps) < 3:
            score += 8

        if risks:
            avg_effectiveness = sum(r.control_effectiveness or 0 for r in risks) / len(risks)
        else:
            avg_effectiveness = ASSUMED_CONTROL_EFFECTIVENESS
        score += round_half_up((avg_effectiveness - 50) / 5)

        critical_gaps = sum(1 for gap in gaps if _key(gap.severity) == "CRITICAL")
        if critical_gaps == 0:
            score += 10
        elif critical_gaps <= 2:
            score += 5
        else:
            score -= 10

        categories_covered = len({_key(risk.category) for risk in risks})
        if categories_covered >= 4:
            score += 10
        elif categories_covered >= 2:
            score += 5

        return round_half_up(_clamp(score))

    def calculate_documentation_score(self, gaps: Sequence[ComplianceGap]) -> int:
        """Score gaps that concern policies, procedures or documentation."""
        documentation_gaps = [
            gap
            for gap in gaps
            if "documentation" in gap.category.lower()
            or "policy" in gap.title.lower()
            or "procedure" in gap.title.lower()
            or "documented" in gap.description.lower()
        ]
        if not documentation_gaps:
            return NO_DOCUMENTATION_GAPS_SCORE

        severity_impact = sum(
            DOCUMENTATION_SEVERITY_WEIGHTS.get(
                _key(gap.severity), DEFAULT_DOCUMENTATION_SEVERITY_WEIGHT
            )
            for gap in documentation_gaps
        )
        impact_ratio = severity_impact / (len(documentation_gaps) * MAX_DOCUMENTATION_IMPACT)
        return round_half_up(100 - impact_ratio * 100)

    # ── Category scores ──────────────────────────────────

    def calculate_category_scores(
        self,
        gaps: Sequence[ComplianceGap],
        risks: Sequence[RiskItem],
    ) -> dict[RiskCategory, int]:
        """Score each of the six risk categories.

        Categories with no mapped gaps or risks get a neutral 50. Otherwise
        the risk and gap sub-scores are averaged, weighted by item count.
        """
        scores: dict[RiskCategory, int] = {}

        for category in RiskCategory:
            category_risks = [r for r in risks if _key(r.category) == category.value]
            category_gaps = [g for g in gaps if map_gap_category(g.category) == category]

            if not category_risks and not category_gaps:
                scores[category] = NEUTRAL_CATEGORY_SCORE
                continue

            risk_score = self._category_risk_score(category_risks)
            gap_score = self._category_gap_score(category_gaps)
            total_items = len(category_risks) + len(category_gaps)
            weighted = (
                risk_score * len(category_risks) + gap_score * len(category_gaps)
            ) / total_items
            scores[category] = round_half_up(weighted)

        return scores

    @staticmethod
    def _category_risk_score(risks: Sequence[RiskItem]) -> int:
        if not risks:
            return NO_RISKS_CATEGORY_RISK_SCORE
        total = sum(
            CATEGORY_ITEM_WEIGHTS.get(_key(r.risk_level), DEFAULT_CATEGORY_ITEM_WEIGHT)
            * (1 - _control_reduction(r))
            for r in risks
        )
        return round_half_up(100 - total / len(risks))

    @staticmethod
    def _category_gap_score(gaps: Sequence[ComplianceGap]) -> int:
        if not gaps:
            return NO_GAPS_CATEGORY_GAP_SCORE
        total = sum(
            CATEGORY_ITEM_WEIGHTS.get(_key(g.severity), DEFAULT_CATEGORY_ITEM_WEIGHT)
            * _gap_factor(g)
            for g in gaps
        )
        return round_half_up(100 - total / len(gaps))

    # ── Composite index ──────────────────────────────────

    def calculate_composite_risk_index(
        self,
        overall_score: float,
        category_scores: Mapping[RiskCategory, float],
        weights: Mapping[RiskCategory, float] | None = None,
    ) -> int:
        """Blend the overall score (60%) with a category-weighted average (40%).

        ``weights`` may override any subset of the default category weights.
        Categories without a weight contribute nothing.
        """
        effective: dict[object, float] = {
            category.value: weight for category, weight in DEFAULT_CATEGORY_WEIGHTS.items()
        }
        if weights:
            effective.update({_key(category): weight for category, weight in weights.items()})

        category_average = sum(
            score * effective.get(_key(category), 0)
            for category, score in category_scores.items()
        )
        return round_half_up(
            overall_score * COMPOSITE_OVERALL_SHARE + category_average * COMPOSITE_CATEGORY_SHARE
        )

    def calculate_breakdown(
        self,
        gaps: Sequence[ComplianceGap],
        risks: Sequence[RiskItem],
        weights: ScoringWeights | None = None,
    ) -> ScoreBreakdown:
        """Compute overall, per-category and composite scores in one pass."""
        overall = self.calculate_overall_score(gaps, risks, weights)
        by_category = self.calculate_category_scores(gaps, risks)
        composite = self.calculate_composite_risk_index(overall, by_category)
        return ScoreBreakdown(
            overall=overall,
            by_category=by_category,
            composite_index=int(_clamp(composite)),
        )

    # ── Risk level ───────────────────────────────────────

    def get_risk_level_from_score(self, score: float) -> RiskLevel:
        """Map an overall score to a risk level; higher scores mean lower risk."""
        thresholds = self.thresholds
        if score >= thresholds.high:
            return RiskLevel.LOW
        if score >= thresholds.medium:
            return RiskLevel.MEDIUM
        if score >= thresholds.low:
            return RiskLevel.HIGH
        return RiskLevel.CRITICAL

    # ── Trend ────────────────────────────────────────────

    def calculate_trend(
        self,
        current_score: float,
        previous_scores: Sequence[float],
    ) -> TrendAnalysis:
        """Compare the current score with the most recent previous score.

        Confidence is 0 without history, 50 with fewer than three previous
        scores, and otherwise reflects whether the series keeps a consistent
        direction.
        """
        if not previous_scores:
            return TrendAnalysis(direction="stable", change_rate=0.0, confidence=0)

        last_score = previous_scores[-1]
        change = current_score - last_score

        # Relative change is undefined against a zero baseline
        if last_score == 0:
            change_rate = 0.0 if change == 0 else 100.0
        else:
            change_rate = abs(change) / last_score * 100

        if change > TREND_STABLE_BAND:
            direction = "improving"
        elif change < -TREND_STABLE_BAND:
            direction = "declining"
        else:
            direction = "stable"

        if len(previous_scores) >= 3:
            confidence = self._trend_confidence(previous_scores, current_score)
        else:
            confidence = 50

        return TrendAnalysis(
            direction=direction,
            change_rate=math.floor(change_rate * 100 + 0.5) / 100,
            confidence=confidence,
        )

    @staticmethod
    def _trend_confidence(scores: Sequence[float], current_score: float) -> int:
        series = [*scores, current_score]
        last_change = 0.0
        for i in range(1, len(series)):
            change = series[i] - series[i - 1]
            if (
                i > 1
                and _sign(change) != _sign(last_change)
                and abs(change) > TREND_FLIP_TOLERANCE
            ):
                return 40
            last_change = change
        return 80

    # ── Insights ─────────────────────────────────────────

    def generate_scoring_insights(
        self,
        overall_score: int,
        category_scores: Mapping[RiskCategory, int],
        gaps: Sequence[ComplianceGap],
        risks: Sequence[RiskItem],
    ) -> ScoringInsights:
        """Build the narrative summary shown alongside the scores."""
        level = get_score_level(overall_score)

        strengths = [
            f"Strong {str(_key(category)).lower()} management ({score}%)"
            for category, score in category_scores.items()
            if score >= STRENGTH_THRESHOLD
        ][:MAX_STRENGTHS]

        weaknesses = [
            f"{str(_key(category)).lower()} gaps identified ({score}%)"
            for category, score in category_scores.items()
            if score < WEAKNESS_THRESHOLD
        ][:MAX_WEAKNESSES]

        priorities = [
            f"Address {gap.title}" for gap in _severe(gaps, "severity")
        ][:MAX_GAP_PRIORITIES]
        priorities += [
            f"Mitigate {risk.title}" for risk in _severe(risks, "risk_level")
        ][:MAX_RISK_PRIORITIES]
        priorities = priorities[:MAX_PRIORITIES]

        return ScoringInsights(
            level=level,
            summary=(
                f"{level} compliance posture with {len(gaps)} gaps and {len(risks)} "
                f"risks identified. Overall risk score: {overall_score}/100."
            ),
            strengths=strengths or ["Comprehensive assessment completed"],
            weaknesses=weaknesses or ["No major weaknesses identified"],
            priorities=priorities or ["Continue monitoring and improvement"],
        )


def _severe(items: Iterable, field: str) -> list:
    """Items whose severity-like field is CRITICAL or HIGH, in input order."""
    return [item for item in items if _key(getattr(item, field)) in ("CRITICAL", "HIGH")]
