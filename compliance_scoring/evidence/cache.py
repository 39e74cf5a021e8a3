"""In-memory TTL cache for classification results.

Entries expire lazily: an entry older than the TTL is dropped on the next
lookup rather than by a background sweep. The map is bounded; when full,
the oldest stored entry is evicted.
"""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from compliance_scoring.evidence.schemas import ClassificationResult

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 24 * 3600
DEFAULT_MAX_ENTRIES = 10_000


@dataclass(frozen=True)
class CacheEntry:
    """A cached result and the clock time it was stored at."""

    result: ClassificationResult
    timestamp: float


class ClassificationCache:
    """Document-id keyed cache of classification results.

    Args:
        ttl_seconds: Age at which an entry stops being served.
        max_entries: Maximum number of entries held.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, document_id: str) -> ClassificationResult | None:
        """Return the cached result, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(document_id)
            if entry is None:
                return None
            if self._clock() - entry.timestamp >= self._ttl:
                del self._entries[document_id]
                logger.debug("Cache entry expired for %s", document_id)
                return None
            return entry.result

    def set(self, document_id: str, result: ClassificationResult) -> None:
        """Store a result, evicting the oldest entry when the cache is full."""
        with self._lock:
            self._entries.pop(document_id, None)
            self._entries[document_id] = CacheEntry(result=result, timestamp=self._clock())
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Cache full, evicted %s", evicted)

    def invalidate(self, document_id: str) -> bool:
        """Remove an entry immediately. Returns True if one was removed."""
        with self._lock:
            return self._entries.pop(document_id, None) is not None

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()
