"""Exceptions raised by the evidence classification pipeline.

Only DocumentNotFoundError escapes EvidenceClassifier.classify_document();
the others are recovered inside the pipeline and turned into heuristic or
fallback results.
"""


class EvidenceError(Exception):
    """Base class for evidence classification errors."""


class DocumentNotFoundError(EvidenceError):
    """Raised when the document store has no record for a document id."""

    def __init__(self, document_id: str) -> None:
        super().__init__(f"Document not found: {document_id}")
        self.document_id = document_id


class ContentFetchError(EvidenceError):
    """Raised when a document's raw content cannot be retrieved."""


class AIClassificationError(EvidenceError):
    """Raised when the AI classifier fails or returns an unusable response."""
