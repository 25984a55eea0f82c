"""Per-process metadata cache."""

import logging
import threading
from collections.abc import Callable, Iterable

from proctree.models import ProcessMetadata, ProcessSnapshotEntry

logger = logging.getLogger(__name__)

UNKNOWN_OWNER = "Unknown"

CacheKey = tuple[int, float]


class MetadataCache:
    """
    Maps (pid, create_time) to metadata computed once per process.

    Entries are never mutated after creation. Keying on the start time as well
    as the pid means a recycled pid misses the cache instead of inheriting the
    previous owner's metadata.

    Owner resolution is expensive, so concurrent misses on the same key are
    serialized: at most one computation runs per key.
    """

    def __init__(self, resolve_owner: Callable[[int], str | None]) -> None:
        """
        Initialize the MetadataCache.

        Args:
            resolve_owner: Callable mapping a pid to an account name or None.
        """
        self._resolve_owner = resolve_owner
        self._entries: dict[CacheKey, ProcessMetadata] = {}
        self._guard = threading.Lock()
        self._key_locks: dict[CacheKey, threading.Lock] = {}
        self._resolver_calls = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    @property
    def resolver_calls(self) -> int:
        """Number of times the owner resolver has been invoked."""
        return self._resolver_calls

    def get(self, key: CacheKey) -> ProcessMetadata | None:
        """Return cached metadata without computing it."""
        return self._entries.get(key)

    def get_or_compute(self, entry: ProcessSnapshotEntry) -> ProcessMetadata:
        """Return metadata for the entry's process, computing it on first sight."""
        key = entry.cache_key
        metadata = self._entries.get(key)
        if metadata is not None:
            return metadata

        with self._guard:
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            metadata = self._entries.get(key)
            if metadata is None:
                metadata = self._compute(entry)
                with self._guard:
                    self._entries[key] = metadata
                    self._key_locks.pop(key, None)
        return metadata

    def _compute(self, entry: ProcessSnapshotEntry) -> ProcessMetadata:
        with self._guard:
            self._resolver_calls += 1
        try:
            username = self._resolve_owner(entry.pid)
        except Exception:
            logger.debug("Owner lookup failed for pid %d", entry.pid, exc_info=True)
            username = None

        return ProcessMetadata(
            name=entry.name,
            exe_path=entry.exe,
            username=username or UNKNOWN_OWNER,
        )

    def evict_missing(self, live_keys: Iterable[CacheKey]) -> int:
        """Drop entries whose process is no longer live. Returns the count dropped."""
        live = set(live_keys)
        with self._guard:
            stale = [key for key in self._entries if key not in live]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("Evicted %d exited processes from metadata cache", len(stale))
        return len(stale)

    def clear(self) -> None:
        """Drop every entry."""
        with self._guard:
            self._entries.clear()
            self._key_locks.clear()
