# =============================================================================
# core/cache.py  —  TTL Cache for Fetched Resources
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Holds the content that fetch tools retrieved, keyed by resource ID, for
#   CACHE_TTL_MS (30 minutes).  The gdrive:// resource URIs point back into
#   this cache, so a caller can read a large document in slices after the
#   tool call that fetched it has already returned.
#
# EXPIRY — TWO WAYS OUT:
#   1. Lazy: get() notices an expired entry, deletes it, and reports a miss.
#   2. Sweep: cleanup() walks every entry and deletes the expired ones.
#   There is no background thread.  An entry that is never read again is
#   only reclaimed by a sweep (or when the process exits).
#
# THE BOUNDARY:
#   An entry is valid while  now - fetched_at <= ttl  (inclusive).
#   Stored at t0, it is readable at t0 + ttl and gone at t0 + ttl + 1.
#
# OWNERSHIP:
#   There is no module-level cache.  tools/mcp_server.py creates ONE
#   ResourceCache per server and passes it to the fetch tools and to the
#   read-resource handler.
# =============================================================================

import logging
import threading
import time
from typing import Any, Callable, Optional

from core.config import CACHE_TTL_MS
from core.models import CacheEntry, ResourceType

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def is_expired(entry: CacheEntry, now: int, ttl_ms: int = CACHE_TTL_MS) -> bool:
    return now - entry.fetched_at > ttl_ms


class ResourceCache:
    """In-memory keyed store with expiry-on-read.

    Args:
        ttl_ms: Maximum age (milliseconds) at which an entry is still valid.
        clock: Zero-argument callable returning the current time in epoch
            milliseconds.  Tests pass a fake clock to step over the boundary.
    """

    def __init__(
        self,
        ttl_ms: int = CACHE_TTL_MS,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.ttl_ms = ttl_ms
        self._clock = clock or now_ms
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        # Raw presence check: does not evict, does not look at the TTL.
        with self._lock:
            return key in self._entries

    def store(
        self,
        key: str,
        raw_content: Any,
        text: str,
        resource_type: ResourceType,
    ) -> CacheEntry:
        """Insert or overwrite the entry for ``key``."""
        entry = CacheEntry(
            raw_content=raw_content,
            extracted_text=text,
            fetched_at=self._clock(),
            resource_type=ResourceType(resource_type),
        )
        with self._lock:
            self._entries[key] = entry
        logger.debug("cache store key=%s type=%s chars=%d", key, entry.resource_type.value, len(text))
        return entry

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for ``key``, or None if absent or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if is_expired(entry, now, self.ttl_ms):
                del self._entries[key]
                logger.debug("cache evict key=%s age_ms=%d", key, now - entry.fetched_at)
                return None
            return entry

    def cleanup(self) -> int:
        """Delete every expired entry and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if is_expired(entry, now, self.ttl_ms)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.info("cache cleanup removed %d expired entries", len(expired))
        return len(expired)

    def stats(self) -> dict:
        """Snapshot of the cache for observability.

        ``age`` is whole seconds since the entry was stored, halves rounded up.
        """
        now = self._clock()
        with self._lock:
            entries = [
                {
                    "key": key,
                    "type": entry.resource_type.value,
                    "age": int((now - entry.fetched_at) / 1000 + 0.5),
                    "textLength": entry.text_length,
                }
                for key, entry in self._entries.items()
            ]
        return {"size": len(entries), "entries": entries}
