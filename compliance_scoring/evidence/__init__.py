"""Evidence tier classification for uploaded compliance documents.

Two-tier pipeline: AI classifier (OpenAI or Anthropic) → rule-based
heuristics, behind a TTL cache and a circuit breaker. Classifies each
document as self-declared (TIER_0), policy document (TIER_1) or
system-generated (TIER_2).

Usage:
    from compliance_scoring.evidence import build_classifier

    classifier = build_classifier(document_store, content_fetcher)
    result = await classifier.classify_document(document_id)
    weight = get_multiplier(result.tier)
"""

from compliance_scoring.evidence.cache import ClassificationCache
from compliance_scoring.evidence.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerState,
    CircuitState,
)
from compliance_scoring.evidence.classifier import (
    EvidenceClassifier,
    build_classifier,
    fallback_result,
)
from compliance_scoring.evidence.config import EvidenceConfig
from compliance_scoring.evidence.errors import (
    AIClassificationError,
    ContentFetchError,
    DocumentNotFoundError,
    EvidenceError,
)
from compliance_scoring.evidence.heuristics import HeuristicRule, classify_with_heuristics
from compliance_scoring.evidence.schemas import (
    ClassificationIndicators,
    ClassificationResult,
    ClassificationUpdate,
    DocumentDescriptor,
    EvidenceTier,
)
from compliance_scoring.evidence.stores import InMemoryDocumentStore, LocalContentFetcher
from compliance_scoring.evidence.strategies import (
    AIAssistedStrategy,
    ClassificationStrategy,
    HeuristicStrategy,
)
from compliance_scoring.evidence.tiers import get_best_tier, get_multiplier

__all__ = [
    "AIAssistedStrategy",
    "AIClassificationError",
    "CircuitBreaker",
    "CircuitBreakerState",
    "CircuitState",
    "ClassificationCache",
    "ClassificationIndicators",
    "ClassificationResult",
    "ClassificationStrategy",
    "ClassificationUpdate",
    "ContentFetchError",
    "DocumentDescriptor",
    "DocumentNotFoundError",
    "EvidenceClassifier",
    "EvidenceConfig",
    "EvidenceError",
    "EvidenceTier",
    "HeuristicRule",
    "HeuristicStrategy",
    "InMemoryDocumentStore",
    "LocalContentFetcher",
    "build_classifier",
    "classify_with_heuristics",
    "fallback_result",
    "get_best_tier",
    "get_multiplier",
]
