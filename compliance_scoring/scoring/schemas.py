"""Data models for the compliance scoring engine.

Gaps and risks come from upstream questionnaire analysis. Their enum-like
fields are typed as plain strings on the models so that unexpected values
flow through to the calculator, which maps them to documented fallback
weights instead of rejecting the whole assessment.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class Severity(str, Enum):
    """Severity of a compliance gap."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class RiskLevel(str, Enum):
    """Inherent level of an identified risk."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class Likelihood(str, Enum):
    RARE = "RARE"
    UNLIKELY = "UNLIKELY"
    POSSIBLE = "POSSIBLE"
    LIKELY = "LIKELY"
    CERTAIN = "CERTAIN"


class Impact(str, Enum):
    NEGLIGIBLE = "NEGLIGIBLE"
    MINOR = "MINOR"
    MODERATE = "MODERATE"
    MAJOR = "MAJOR"
    CATASTROPHIC = "CATASTROPHIC"


class RiskCategory(str, Enum):
    """The six fixed categories scores are broken down by.

    Declaration order is the iteration order used for category scores and
    insights.
    """

    GEOGRAPHIC = "GEOGRAPHIC"
    TRANSACTION = "TRANSACTION"
    GOVERNANCE = "GOVERNANCE"
    OPERATIONAL = "OPERATIONAL"
    REGULATORY = "REGULATORY"
    REPUTATIONAL = "REPUTATIONAL"


class ComplianceGap(BaseModel):
    """A deviation between the organization's state and a requirement.

    ``gap_size`` is the percentage (0-100) by which the gap deviates from the
    required state. None means unknown and is scored as a full gap (100).
    """

    id: str
    category: str = Field(description="Free-text gap category, e.g. 'Governance'")
    title: str = ""
    description: str = ""
    severity: str = Severity.MEDIUM.value
    priority: str = "MEDIUM"
    gap_size: float | None = Field(default=None, ge=0.0, le=100.0)


class RiskItem(BaseModel):
    """A risk identified during assessment.

    ``control_effectiveness`` is the percentage (0-100) by which existing
    controls reduce the risk's effective impact. None scores as 0.
    """

    id: str
    category: str = Field(description="One of RiskCategory; other values are kept as-is")
    title: str = ""
    description: str = ""
    risk_level: str = RiskLevel.MEDIUM.value
    likelihood: str = Likelihood.POSSIBLE.value
    impact: str = Impact.MODERATE.value
    control_effectiveness: float | None = Field(default=None, ge=0.0, le=100.0)


class ScoringWeights(BaseModel):
    """Linear coefficients for the four overall-score components.

    They should sum to 1.0; that is the caller's responsibility.
    """

    compliance: float = 0.4
    risk: float = 0.5
    maturity: float = 0.0
    documentation: float = 0.1


class ScoringThresholds(BaseModel):
    """Score boundaries used to derive a risk level from an overall score."""

    low: int = 30
    medium: int = 60
    high: int = 80


class ScoreBreakdown(BaseModel):
    """Overall, per-category and composite scores for one assessment."""

    overall: int = Field(ge=0, le=100)
    by_category: dict[RiskCategory, int] = Field(default_factory=dict)
    composite_index: int = Field(ge=0, le=100)


class TrendAnalysis(BaseModel):
    """Direction and stability of a score relative to its history."""

    direction: Literal["improving", "declining", "stable"] = "stable"
    change_rate: float = Field(default=0.0, description="Percent change vs. the last score")
    confidence: int = Field(default=0, ge=0, le=100)


class ScoringInsights(BaseModel):
    """Narrative summary of a scored assessment."""

    level: str
    summary: str
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    priorities: list[str] = Field(default_factory=list)
