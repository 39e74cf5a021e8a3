"""Narrow interfaces to the classifier's external collaborators.

The document store, the content store and the AI provider live outside this
package. Anything satisfying these protocols can be injected into
EvidenceClassifier.
"""

from typing import Protocol, runtime_checkable

from compliance_scoring.evidence.schemas import (
    ClassificationResult,
    ClassificationUpdate,
    DocumentDescriptor,
)


@runtime_checkable
class DocumentStore(Protocol):
    """Lookup and update of uploaded document records."""

    async def get(self, document_id: str) -> DocumentDescriptor | None:
        """Return the document's descriptor, or None if unknown."""
        ...

    async def update(self, document_id: str, update: ClassificationUpdate) -> None:
        """Persist classification fields on the document record. Idempotent."""
        ...


@runtime_checkable
class ContentFetcher(Protocol):
    """Retrieval of a document's raw text."""

    async def fetch(self, content_locator: str) -> str:
        """Return the document text.

        Raises:
            ContentFetchError: If the content cannot be retrieved.
        """
        ...


@runtime_checkable
class AIClassifier(Protocol):
    """Model-backed evidence tier classification."""

    async def classify(self, filename: str, excerpt: str) -> ClassificationResult:
        """Classify an already-truncated content excerpt.

        Raises:
            AIClassificationError: On an empty or malformed response.
            Exception: Transport errors from the provider SDK propagate.
        """
        ...

    async def close(self) -> None:
        ...
