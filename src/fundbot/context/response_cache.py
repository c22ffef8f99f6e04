"""
Response Cache
Bounded, time-expiring memo of rendered answers keyed by normalized query text.

The cache is shared by every in-flight turn, so all access goes through an
internal lock. Eviction is by insertion order, not by access.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger("fundbot.agent.cache")

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_ENTRIES = 100

_WHITESPACE = re.compile(r"\s+")


def cache_key(query: str) -> str:
    """Lower-case, trim and collapse internal whitespace."""
    return _WHITESPACE.sub(" ", (query or "").strip().lower())


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: str
    created_at: float


class ResponseCache:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock or time.monotonic
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, query: str) -> bool:
        with self._lock:
            return cache_key(query) in self._entries

    def get(self, query: str) -> Optional[str]:
        """
        Return the cached message for a query, or None if absent or expired.
        Expired entries stay in place until evicted or overwritten.
        """
        key = cache_key(query)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.created_at >= self.ttl_seconds:
                logger.debug("Cache entry expired for key=%r", key)
                return None
            return entry.value

    def put(self, query: str, message: str) -> None:
        """
        Store a rendered message. Overwriting replaces the entry in place,
        keeping its original eviction position; inserting a new key at capacity evicts the
        oldest-inserted entry first.
        """
        key = cache_key(query)
        entry = CacheEntry(key=key, value=message, created_at=self._clock())
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Cache full (%d); evicted oldest key=%r", self.max_entries, evicted)
            self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("Response cache cleared")
