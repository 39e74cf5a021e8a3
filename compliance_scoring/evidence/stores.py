"""Local implementations of the document and content store interfaces.

Production deployments inject their own database-backed store and object
storage fetcher. These are used by the CLI, which classifies files on
disk, and by tests.
"""

import asyncio
import logging
from pathlib import Path

from compliance_scoring.evidence.errors import ContentFetchError
from compliance_scoring.evidence.schemas import ClassificationUpdate, DocumentDescriptor

logger = logging.getLogger(__name__)


class InMemoryDocumentStore:
    """Dict-backed document store.

    Classification updates are applied to ``current_tier`` and kept in
    ``updates`` for inspection.
    """

    def __init__(self, documents: list[DocumentDescriptor] | None = None) -> None:
        self._documents: dict[str, DocumentDescriptor] = {
            doc.id: doc for doc in documents or []
        }
        self.updates: dict[str, ClassificationUpdate] = {}

    def add(self, document: DocumentDescriptor) -> None:
        self._documents[document.id] = document

    async def get(self, document_id: str) -> DocumentDescriptor | None:
        return self._documents.get(document_id)

    async def update(self, document_id: str, update: ClassificationUpdate) -> None:
        document = self._documents.get(document_id)
        if document is not None:
            self._documents[document_id] = document.model_copy(
                update={"current_tier": update.tier}
            )
        self.updates[document_id] = update


class LocalContentFetcher:
    """Reads document content from the local filesystem.

    Content locators are paths, resolved against ``base_dir`` when relative.
    Bytes that are not valid UTF-8 are replaced rather than rejected.
    """

    def __init__(self, base_dir: Path | str | None = None) -> None:
        self._base_dir = Path(base_dir) if base_dir is not None else None

    def _resolve(self, content_locator: str) -> Path:
        path = Path(content_locator)
        if self._base_dir is not None and not path.is_absolute():
            path = self._base_dir / path
        return path

    async def fetch(self, content_locator: str) -> str:
        path = self._resolve(content_locator)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            logger.error("Failed to read document content from %s: %s", path, e)
            raise ContentFetchError(f"Failed to fetch document content: {path.name}") from e
        return data.decode("utf-8", errors="replace")
