"""Evidence tier weighting.

Downstream scoring discounts answers backed by weaker evidence. A tier's
multiplier scales how strongly that evidence counts.
"""

from collections.abc import Iterable

from compliance_scoring.evidence.schemas import EvidenceTier

TIER_MULTIPLIERS = {
    EvidenceTier.TIER_2.value: 1.0,  # system-generated, no penalty
    EvidenceTier.TIER_1.value: 0.8,
    EvidenceTier.TIER_0.value: 0.6,
}
DEFAULT_MULTIPLIER = TIER_MULTIPLIERS[EvidenceTier.TIER_0.value]

# Highest tier first
TIER_RANKING = (EvidenceTier.TIER_2, EvidenceTier.TIER_1, EvidenceTier.TIER_0)


def get_multiplier(tier: EvidenceTier | str | None) -> float:
    """Multiplier for an evidence tier; unknown tiers count as TIER_0."""
    key = tier.value if isinstance(tier, EvidenceTier) else tier
    return TIER_MULTIPLIERS.get(key, DEFAULT_MULTIPLIER)


def get_best_tier(tiers: Iterable[EvidenceTier | str]) -> EvidenceTier:
    """Most reliable tier among ``tiers``, or TIER_0 if there are none."""
    present = {t.value if isinstance(t, EvidenceTier) else t for t in tiers}
    for tier in TIER_RANKING:
        if tier.value in present:
            return tier
    return EvidenceTier.TIER_0
