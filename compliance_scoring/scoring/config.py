"""Configuration for the scoring engine.

Default component weights and risk-level thresholds. All settings can be
overridden via SCORING_* environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from compliance_scoring.scoring.schemas import ScoringThresholds, ScoringWeights


class ScoringConfig(BaseSettings):
    """Configuration for the compliance scoring engine.

    Settings can be overridden via environment variables prefixed with SCORING_.

    Example:
        SCORING_WEIGHT_COMPLIANCE=0.3
        SCORING_WEIGHT_MATURITY=0.2
        SCORING_THRESHOLD_HIGH=85
    """

    model_config = SettingsConfigDict(
        env_prefix="SCORING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Overall score component weights. Maturity is disabled by default.
    weight_compliance: float = Field(default=0.4, ge=0.0, le=1.0)
    weight_risk: float = Field(default=0.5, ge=0.0, le=1.0)
    weight_maturity: float = Field(default=0.0, ge=0.0, le=1.0)
    weight_documentation: float = Field(default=0.1, ge=0.0, le=1.0)

    # Risk level thresholds (score >= high -> LOW risk)
    threshold_low: int = Field(default=30, ge=0, le=100)
    threshold_medium: int = Field(default=60, ge=0, le=100)
    threshold_high: int = Field(default=80, ge=0, le=100)

    @property
    def weights(self) -> ScoringWeights:
        """Component weights as a ScoringWeights value."""
        return ScoringWeights(
            compliance=self.weight_compliance,
            risk=self.weight_risk,
            maturity=self.weight_maturity,
            documentation=self.weight_documentation,
        )

    @property
    def thresholds(self) -> ScoringThresholds:
        """Risk level thresholds as a ScoringThresholds value."""
        return ScoringThresholds(
            low=self.threshold_low,
            medium=self.threshold_medium,
            high=self.threshold_high,
        )
