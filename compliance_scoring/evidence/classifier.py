"""Evidence tier classification pipeline.

Classifies one uploaded document into TIER_0 / TIER_1 / TIER_2:
  1. Cache lookup by document id (30 day TTL)
  2. Document descriptor from the document store (unknown id → error)
  3. Circuit breaker gate (open → immediate fallback, no content fetch)
  4. Content fetch from the content store
  5. Strategy: AI classifier with heuristic fallback, or heuristics only
  6. Persist tier/confidence/reason to the document record
  7. Cache the result, record success or failure on the breaker

Availability over accuracy: for a known document, classification always
returns a result. The worst case is a zero-confidence TIER_0 with the
failure detail in ``reason``. DocumentNotFoundError is the only exception
that reaches the caller.

Collaborators are injected; nothing is initialized lazily. Use
``build_classifier()`` to pick the strategy from configuration.
"""

import asyncio
import time
from collections.abc import Sequence
from typing import Any

import structlog

from compliance_scoring.evidence.cache import ClassificationCache
from compliance_scoring.evidence.circuit_breaker import CircuitBreaker
from compliance_scoring.evidence.config import EvidenceConfig
from compliance_scoring.evidence.errors import DocumentNotFoundError
from compliance_scoring.evidence.interfaces import ContentFetcher, DocumentStore
from compliance_scoring.evidence.llm_client import build_ai_classifier
from compliance_scoring.evidence.schemas import (
    ClassificationResult,
    ClassificationUpdate,
    DocumentDescriptor,
    EvidenceTier,
)
from compliance_scoring.evidence.strategies import (
    AIAssistedStrategy,
    ClassificationStrategy,
    HeuristicStrategy,
)
from compliance_scoring.observability.logging import bound_context
from compliance_scoring.observability.metrics import MetricsCollector, get_metrics

logger = structlog.get_logger(__name__)

FALLBACK_REASON_PREFIX = "Classification failed - defaulting to self-declared tier."
CIRCUIT_OPEN_DETAIL = "Circuit breaker open - service temporarily unavailable"


def fallback_result(detail: str) -> ClassificationResult:
    """Zero-confidence TIER_0 result carrying the failure detail."""
    return ClassificationResult(
        tier=EvidenceTier.TIER_0,
        confidence=0.0,
        reason=f"{FALLBACK_REASON_PREFIX} {detail}",
    )


def _remaining(deadline: float | None) -> float | None:
    if deadline is None:
        return None
    return deadline - time.monotonic()


class EvidenceClassifier:
    """Classifies documents into evidence tiers with caching and failure isolation.

    Constructor: ``(document_store, content_fetcher, strategy?, circuit_breaker?,
    cache?, config?, metrics?)``. The breaker and the cache belong to this
    instance; do not share them between classifiers.

    Methods:
      - ``classify_document(document_id)``: full pipeline for one document
      - ``classify_documents(document_ids)``: bounded-concurrency batch
      - ``invalidate_cache(document_id)``: force re-classification
      - ``get_stats()``: counters and circuit breaker status
      - ``close()``: cleanup

    Args:
        document_store: Source of document descriptors and sink for results.
        content_fetcher: Retrieves raw document text.
        strategy: Classification strategy. Defaults to HeuristicStrategy.
        circuit_breaker: Breaker gating the pipeline. Built from config if omitted.
        cache: Result cache. Built from config if omitted.
        config: Evidence configuration. Defaults to EvidenceConfig().
        metrics: Prometheus collector. Defaults to the global collector.
    """

    def __init__(
        self,
        document_store: DocumentStore,
        content_fetcher: ContentFetcher,
        strategy: ClassificationStrategy | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        cache: ClassificationCache | None = None,
        config: EvidenceConfig | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._config = config or EvidenceConfig()
        self._store = document_store
        self._fetcher = content_fetcher
        self._strategy = strategy or HeuristicStrategy(self._config.max_content_length)
        self._breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=self._config.circuit_failure_threshold,
            recovery_timeout=self._config.circuit_recovery_timeout,
        )
        self._cache = cache or ClassificationCache(
            ttl_seconds=self._config.cache_ttl_seconds,
            max_entries=self._config.cache_max_entries,
        )
        self._metrics = metrics or get_metrics()
        self._stats = {
            "total_requests": 0,
            "cache_hits": 0,
            "ai_classified": 0,
            "heuristic_classified": 0,
            "ai_failures": 0,
            "circuit_open_rejections": 0,
            "fallbacks": 0,
        }

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        return self._breaker

    @property
    def strategy(self) -> ClassificationStrategy:
        return self._strategy

    # ── Main Pipeline ────────────────────────────────────

    async def classify_document(
        self,
        document_id: str,
        *,
        timeout: float | None = None,
    ) -> ClassificationResult:
        """Classify one document into an evidence tier.

        Args:
            document_id: Document store identifier.
            timeout: Optional overall deadline in seconds. The content fetch
                and the AI call share what is left of it; when it runs out
                the heuristic path is used.

        Returns:
            ClassificationResult (always, for a known document).

        Raises:
            DocumentNotFoundError: If the document store has no such id.
        """
        self._stats["total_requests"] += 1
        started = time.monotonic()
        deadline = started + timeout if timeout is not None else None

        if self._config.cache_enabled:
            cached = self._cache.get(document_id)
            self._metrics.record_cache_lookup(hit=cached is not None)
            if cached is not None:
                self._stats["cache_hits"] += 1
                logger.info("Using cached classification result", document_id=document_id)
                return cached

        try:
            result, path = await self._classify_uncached(document_id, deadline)
        except DocumentNotFoundError:
            raise
        except Exception as e:
            logger.error(
                "Document classification failed",
                document_id=document_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            self._breaker.record_failure()
            result, path = fallback_result(str(e) or type(e).__name__), "fallback"

        if path == "fallback":
            self._stats["fallbacks"] += 1
        self._metrics.record_classification(
            tier=result.tier.value, path=path, latency=time.monotonic() - started,
        )
        self._metrics.set_circuit_state(self._breaker.name, self._breaker.state.value)
        return result

    async def _classify_uncached(
        self,
        document_id: str,
        deadline: float | None,
    ) -> tuple[ClassificationResult, str]:
        document = await self._store.get(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)

        if not self._breaker.allow_request():
            self._stats["circuit_open_rejections"] += 1
            logger.warning("Circuit breaker OPEN - returning default tier", document_id=document_id)
            return fallback_result(CIRCUIT_OPEN_DETAIL), "circuit_open"

        try:
            return await self._classify_admitted(document, deadline)
        except asyncio.CancelledError:
            # A cancelled recovery attempt must not hold the HALF_OPEN slot
            self._breaker.release_recovery_slot()
            raise

    async def _classify_admitted(
        self,
        document: DocumentDescriptor,
        deadline: float | None,
    ) -> tuple[ClassificationResult, str]:
        document_id = document.id
        try:
            content = await self._fetch_content(document, deadline)
        except asyncio.TimeoutError:
            if deadline is None:
                raise
            return self._classify_past_deadline(document), "heuristic"

        outcome = await self._strategy.classify(
            document.filename, content, timeout=_remaining(deadline),
        )
        if outcome.ai_error is not None:
            self._stats["ai_failures"] += 1
            self._metrics.record_ai_failure(type(outcome.ai_error).__name__)
        if outcome.path == "ai":
            self._stats["ai_classified"] += 1
        else:
            self._stats["heuristic_classified"] += 1

        result = outcome.result
        await self._store.update(document_id, ClassificationUpdate.from_result(result))
        if self._config.cache_enabled:
            self._cache.set(document_id, result)

        if outcome.ai_error is not None:
            self._breaker.record_failure()
        else:
            self._breaker.record_success()

        logger.info(
            "Document classified",
            document_id=document_id,
            tier=result.tier.value,
            confidence=result.confidence,
            path=outcome.path,
        )
        return result, outcome.path

    async def _fetch_content(self, document: DocumentDescriptor, deadline: float | None) -> str:
        remaining = _remaining(deadline)
        if remaining is None:
            return await self._fetcher.fetch(document.content_locator)
        return await asyncio.wait_for(
            self._fetcher.fetch(document.content_locator), timeout=max(remaining, 0.0),
        )

    def _classify_past_deadline(self, document: DocumentDescriptor) -> ClassificationResult:
        """Classify from the filename alone when the content fetch ran out of time.

        The result is returned but neither persisted nor cached, since it
        was computed without the document's content.
        """
        logger.warning(
            "Content fetch exceeded deadline, classifying by filename only",
            document_id=document.id,
        )
        self._breaker.record_failure()
        self._stats["heuristic_classified"] += 1
        return self._strategy.classify_heuristically(document.filename, "")

    # ── Batch ────────────────────────────────────────────

    async def classify_documents(
        self,
        document_ids: Sequence[str],
        *,
        concurrency: int | None = None,
        timeout: float | None = None,
    ) -> list[ClassificationResult]:
        """Classify many documents with bounded concurrency.

        Each document is isolated: an unknown id yields a fallback result
        instead of failing the batch.

        Args:
            document_ids: Document store identifiers.
            concurrency: Maximum classifications in flight. Defaults to
                config.batch_concurrency.
            timeout: Per-document deadline in seconds.

        Returns:
            One ClassificationResult per id, in input order.
        """
        semaphore = asyncio.Semaphore(concurrency or self._config.batch_concurrency)

        async def _classify_one(document_id: str) -> ClassificationResult:
            with bound_context(document_id=document_id):
                async with semaphore:
                    try:
                        return await self.classify_document(document_id, timeout=timeout)
                    except DocumentNotFoundError as e:
                        logger.warning("Batch classification skipped unknown document")
                        self._stats["fallbacks"] += 1
                        return fallback_result(str(e))

        return list(await asyncio.gather(*(_classify_one(d) for d in document_ids)))

    # ── Cache ────────────────────────────────────────────

    def invalidate_cache(self, document_id: str) -> None:
        """Drop the cached result so the next call re-classifies."""
        self._cache.invalidate(document_id)
        logger.info("Cache invalidated for document", document_id=document_id)

    # ── Stats & Cleanup ──────────────────────────────────

    def get_stats(self) -> dict[str, Any]:
        """Return classification statistics and circuit breaker state."""
        breaker = self._breaker.snapshot()
        return {
            **self._stats,
            "strategy": self._strategy.name,
            "cache_size": len(self._cache),
            "circuit_state": breaker.state.value,
            "circuit_failures": breaker.failure_count,
        }

    async def close(self) -> None:
        """Clean up AI clients."""
        await self._strategy.close()


def build_classifier(
    document_store: DocumentStore,
    content_fetcher: ContentFetcher,
    config: EvidenceConfig | None = None,
    metrics: MetricsCollector | None = None,
    heuristic_only: bool = False,
) -> EvidenceClassifier:
    """Construct a classifier, choosing the strategy from configuration.

    AI-assisted when the configured provider has an API key (and
    ``heuristic_only`` is False), heuristic-only otherwise.
    """
    config = config or EvidenceConfig()
    ai_classifier = None if heuristic_only else build_ai_classifier(config)

    strategy: ClassificationStrategy
    if ai_classifier is not None:
        strategy = AIAssistedStrategy(
            ai_classifier,
            ai_timeout=config.ai_timeout,
            max_content_length=config.max_content_length,
        )
        logger.info("Evidence classifier initialized with AI", provider=config.ai_provider)
    else:
        strategy = HeuristicStrategy(config.max_content_length)
        logger.info("Evidence classifier using heuristics only")

    return EvidenceClassifier(
        document_store,
        content_fetcher,
        strategy=strategy,
        config=config,
        metrics=metrics,
    )
