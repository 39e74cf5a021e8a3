"""Tests for scoring configuration."""

import pytest

from compliance_scoring.scoring.config import ScoringConfig
from compliance_scoring.scoring.schemas import ScoringThresholds, ScoringWeights


class TestScoringConfig:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("WEIGHT_COMPLIANCE", "WEIGHT_RISK", "THRESHOLD_HIGH"):
            monkeypatch.delenv(f"SCORING_{name}", raising=False)
        config = ScoringConfig(_env_file=None)
        assert config.weights == ScoringWeights(
            compliance=0.4, risk=0.5, maturity=0.0, documentation=0.1
        )
        assert config.thresholds == ScoringThresholds(low=30, medium=60, high=80)

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCORING_WEIGHT_MATURITY", "0.2")
        monkeypatch.setenv("SCORING_THRESHOLD_HIGH", "85")
        config = ScoringConfig(_env_file=None)
        assert config.weights.maturity == 0.2
        assert config.thresholds.high == 85

    def test_rejects_out_of_range_weight(self) -> None:
        with pytest.raises(ValueError):
            ScoringConfig(weight_risk=1.5)
