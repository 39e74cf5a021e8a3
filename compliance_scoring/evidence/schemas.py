"""Data models for evidence classification.

Evidence tiers rank how much an uploaded document can be trusted as proof
of a control:

- TIER_0: self-declared (emails, notes, drafts)
- TIER_1: policy documents (versioned, approved procedures)
- TIER_2: system-generated (exports, logs, timestamped reports)
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EvidenceTier(str, Enum):
    """Evidentiary trust level, in increasing order of reliability."""

    TIER_0 = "TIER_0"
    TIER_1 = "TIER_1"
    TIER_2 = "TIER_2"


class ClassificationIndicators(BaseModel):
    """Structural signals observed in a document.

    Accepts both snake_case and the camelCase keys used in AI responses.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    has_timestamps: bool = False
    has_version_control: bool = False
    has_approval_signatures: bool = False
    is_structured_data: bool = False


class ClassificationResult(BaseModel):
    """Outcome of classifying one document.

    Immutable so that a cached result handed to several callers stays
    identical.
    """

    model_config = ConfigDict(frozen=True)

    tier: EvidenceTier
    confidence: float = Field(ge=0.0, le=1.0)
    reason: str
    indicators: ClassificationIndicators = Field(default_factory=ClassificationIndicators)


class AIClassificationResponse(BaseModel):
    """Structured response expected from the AI classifier.

    Validation is strict: a missing field, an unknown tier or an
    out-of-range confidence rejects the whole response.
    """

    model_config = ConfigDict(extra="ignore")

    tier: Literal["TIER_0", "TIER_1", "TIER_2"]
    confidence: float = Field(ge=0.0, le=1.0)
    reason: str = Field(min_length=1)
    indicators: ClassificationIndicators = Field(default_factory=ClassificationIndicators)

    def to_result(self) -> ClassificationResult:
        return ClassificationResult(
            tier=EvidenceTier(self.tier),
            confidence=self.confidence,
            reason=self.reason,
            indicators=self.indicators,
        )


class DocumentDescriptor(BaseModel):
    """What the document store knows about an uploaded document."""

    id: str
    filename: str
    content_locator: str = Field(description="Opaque key understood by the content fetcher")
    current_tier: EvidenceTier | None = None


class ClassificationUpdate(BaseModel):
    """Classification fields written back to the document record."""

    tier: EvidenceTier
    confidence: float = Field(ge=0.0, le=1.0)
    reason: str
    classified_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_result(cls, result: ClassificationResult) -> "ClassificationUpdate":
        return cls(tier=result.tier, confidence=result.confidence, reason=result.reason)
