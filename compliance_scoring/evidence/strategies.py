"""Classification strategies selected once at classifier construction.

- HeuristicStrategy: rule table only, no I/O.
- AIAssistedStrategy: AI classifier first; any failure (transport error,
  timeout, malformed response) falls back to the rule table and is
  reported back so the caller can count it against the circuit breaker.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from compliance_scoring.evidence.heuristics import MAX_SCAN_LENGTH, classify_with_heuristics
from compliance_scoring.evidence.interfaces import AIClassifier
from compliance_scoring.evidence.schemas import ClassificationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyOutcome:
    """Result of one strategy run.

    ``path`` is "ai" or "heuristic". ``ai_error`` is set when an AI attempt
    was made and failed, even though a heuristic result was still produced.
    """

    result: ClassificationResult
    path: str
    ai_error: Exception | None = None


class ClassificationStrategy(ABC):
    """Turns a document's content and filename into a ClassificationResult."""

    name: str = "base"

    def __init__(self, max_content_length: int = MAX_SCAN_LENGTH) -> None:
        self._max_content_length = max_content_length

    def truncate(self, content: str) -> str:
        """Excerpt of the content that is actually analyzed."""
        return content[: self._max_content_length]

    def classify_heuristically(self, filename: str, content: str) -> ClassificationResult:
        return classify_with_heuristics(
            self.truncate(content), filename, max_length=self._max_content_length,
        )

    @abstractmethod
    async def classify(
        self,
        filename: str,
        content: str,
        timeout: float | None = None,
    ) -> StrategyOutcome:
        """Classify content. Never raises for AI failures."""

    async def close(self) -> None:
        """Release any provider clients."""


class HeuristicStrategy(ClassificationStrategy):
    """Rule-based classification only."""

    name = "heuristic"

    async def classify(
        self,
        filename: str,
        content: str,
        timeout: float | None = None,
    ) -> StrategyOutcome:
        return StrategyOutcome(
            result=self.classify_heuristically(filename, content),
            path="heuristic",
        )


class AIAssistedStrategy(ClassificationStrategy):
    """AI classification with heuristic fallback.

    Args:
        ai_classifier: Provider-backed classifier.
        ai_timeout: Upper bound in seconds for one AI call.
        max_content_length: Characters of content sent to the AI.
    """

    name = "ai"

    def __init__(
        self,
        ai_classifier: AIClassifier,
        ai_timeout: float = 30.0,
        max_content_length: int = MAX_SCAN_LENGTH,
    ) -> None:
        super().__init__(max_content_length)
        self._ai = ai_classifier
        self._ai_timeout = ai_timeout

    async def classify(
        self,
        filename: str,
        content: str,
        timeout: float | None = None,
    ) -> StrategyOutcome:
        """Try the AI classifier, falling back to heuristics on any failure.

        Args:
            filename: Original upload filename.
            content: Raw document text (truncated here).
            timeout: Remaining caller deadline in seconds, if any. The AI
                call gets the smaller of this and the configured timeout.
                An already-expired deadline skips the AI call without
                counting as a failure.
        """
        excerpt = self.truncate(content)
        budget = self._ai_timeout if timeout is None else min(self._ai_timeout, timeout)

        if budget <= 0:
            logger.info("Deadline exhausted before AI call, using heuristics")
            return StrategyOutcome(
                result=self.classify_heuristically(filename, excerpt),
                path="heuristic",
            )

        try:
            result = await asyncio.wait_for(self._ai.classify(filename, excerpt), timeout=budget)
        except Exception as e:
            logger.warning(
                "AI classification failed (%s: %s), using heuristics fallback",
                type(e).__name__,
                e,
            )
            return StrategyOutcome(
                result=self.classify_heuristically(filename, excerpt),
                path="heuristic",
                ai_error=e,
            )

        return StrategyOutcome(result=result, path="ai")

    async def close(self) -> None:
        await self._ai.close()
