"""
In-process TTL cache for analysis results, keyed by a hash of the input text.

One instance per namespace (sentiment, summary) is created when the
analysis service is built and handed to the components that need it.
Entries expire lazily on read; an optional capacity evicts the oldest
insertion first.  The clock is injectable for tests.
"""
from __future__ import annotations

import dataclasses
import logging
import time
from typing import Any, Callable, Dict, Optional

from app.utils.helpers import generate_hash

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclasses.dataclass
class _Entry:
    value: Any
    stored_at: float


class AnalysisCache:
    """Content-addressed key/value store with a soft time-to-live."""

    def __init__(
        self,
        namespace: str,
        ttl_seconds: float,
        max_entries: Optional[int] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.namespace = namespace
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries or None
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}

    def key_for(self, text: str) -> str:
        return f"{self.namespace}_{generate_hash(text)}"

    def get(self, text: str) -> Optional[Any]:
        """Return the cached value for *text*, or None if absent or expired."""
        key = self.key_for(text)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self.ttl_seconds:
            del self._entries[key]
            logger.debug("%s cache: expired %s", self.namespace, key[:24])
            return None
        return entry.value

    def set(self, text: str, value: Any) -> None:
        key = self.key_for(text)
        self._entries.pop(key, None)
        if self.max_entries is not None:
            while len(self._entries) >= self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
        self._entries[key] = _Entry(value=value, stored_at=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


@dataclasses.dataclass
class AnalysisOutcome:
    """A result plus where it came from (llm, local, local-reconstructed, cache)."""

    data: Any
    source: str
    cached: bool = False
