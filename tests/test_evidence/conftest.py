"""Pytest fixtures for evidence classification tests."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from compliance_scoring.evidence.cache import ClassificationCache
from compliance_scoring.evidence.circuit_breaker import CircuitBreaker
from compliance_scoring.evidence.classifier import EvidenceClassifier
from compliance_scoring.evidence.config import EvidenceConfig
from compliance_scoring.evidence.errors import ContentFetchError
from compliance_scoring.evidence.schemas import (
    ClassificationIndicators,
    ClassificationResult,
    DocumentDescriptor,
    EvidenceTier,
)
from compliance_scoring.evidence.stores import InMemoryDocumentStore
from compliance_scoring.evidence.strategies import AIAssistedStrategy


class FakeContentFetcher:
    """Serves content from a dict keyed by content locator.

    Locators listed in ``failing`` raise ContentFetchError; ``delay`` makes
    every fetch sleep first. ``calls`` counts fetch attempts.
    """

    def __init__(self, contents: dict[str, str], delay: float = 0.0) -> None:
        self.contents = contents
        self.delay = delay
        self.failing: set[str] = set()
        self.calls = 0

    async def fetch(self, content_locator: str) -> str:
        self.calls += 1
        await asyncio.sleep(self.delay)
        if content_locator in self.failing or content_locator not in self.contents:
            raise ContentFetchError(f"Failed to fetch document content: {content_locator}")
        return self.contents[content_locator]


DOCUMENTS = {
    "doc-note": ("meeting-notes.txt", "Hi all, please remember to lock your screens. Thanks!"),
    "doc-export": ("access-export.csv", '"user","role","last_login"\n"alice","admin","2024-01-03"'),
    "doc-policy": ("handbook.docx", "Information Security Handbook\nVersion 3\nApproved by: CISO"),
    "doc-log": ("audit.log", "login ok"),
}


@pytest.fixture
def evidence_config() -> EvidenceConfig:
    """Config with no AI keys, independent of env."""
    return EvidenceConfig(
        _env_file=None,
        openai_api_key=None,
        anthropic_api_key=None,
        circuit_failure_threshold=5,
        circuit_recovery_timeout=300.0,
        batch_concurrency=4,
    )


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore([
        DocumentDescriptor(id=doc_id, filename=filename, content_locator=f"s3://{doc_id}")
        for doc_id, (filename, _) in DOCUMENTS.items()
    ])


@pytest.fixture
def content_fetcher() -> FakeContentFetcher:
    return FakeContentFetcher({
        f"s3://{doc_id}": content for doc_id, (_, content) in DOCUMENTS.items()
    })


@pytest.fixture
def breaker(clock) -> CircuitBreaker:
    return CircuitBreaker(failure_threshold=5, recovery_timeout=300.0, clock=clock)


@pytest.fixture
def cache(clock) -> ClassificationCache:
    return ClassificationCache(ttl_seconds=30 * 24 * 3600, clock=clock)


@pytest.fixture
def ai_result() -> ClassificationResult:
    return ClassificationResult(
        tier=EvidenceTier.TIER_1,
        confidence=0.85,
        reason="Approved, versioned policy document",
        indicators=ClassificationIndicators(has_version_control=True),
    )


@pytest.fixture
def ai_classifier(ai_result: ClassificationResult) -> AsyncMock:
    """AI classifier double returning ``ai_result``."""
    classifier = AsyncMock()
    classifier.classify.return_value = ai_result
    return classifier


@pytest.fixture
def classifier(
    document_store, content_fetcher, breaker, cache, evidence_config, metrics
) -> EvidenceClassifier:
    """Heuristic-only classifier with fake-clock breaker and cache."""
    return EvidenceClassifier(
        document_store,
        content_fetcher,
        circuit_breaker=breaker,
        cache=cache,
        config=evidence_config,
        metrics=metrics,
    )


@pytest.fixture
def ai_evidence_classifier(
    document_store, content_fetcher, breaker, cache, evidence_config, metrics, ai_classifier
) -> EvidenceClassifier:
    """AI-assisted classifier backed by the ``ai_classifier`` double."""
    return EvidenceClassifier(
        document_store,
        content_fetcher,
        strategy=AIAssistedStrategy(ai_classifier, ai_timeout=5.0),
        circuit_breaker=breaker,
        cache=cache,
        config=evidence_config,
        metrics=metrics,
    )
