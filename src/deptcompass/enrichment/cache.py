"""
Cache Module - Process-scoped memo of enrichment results.
=========================================================

Keyed by "{university}-{department}". Entries are populated lazily and never
evicted; staleness for the lifetime of the process is accepted. A duplicate
in-flight request for the same key simply recomputes.
"""

import threading
from typing import Optional

from deptcompass.shared.schemas import EnrichmentPayload


def cache_key(university_name: str, department_name: str) -> str:
    return f"{university_name}-{department_name}"


class EnrichmentCache:
    """
    Thread-safe key -> EnrichmentPayload store.

    Example:
        >>> cache = EnrichmentCache()
        >>> cache.set("서울대학교", "컴퓨터공학부", payload)
        >>> cache.get("서울대학교", "컴퓨터공학부") is payload
        True
    """

    def __init__(self):
        self._entries: dict[str, EnrichmentPayload] = {}
        self._lock = threading.Lock()

    def get(self, university_name: str, department_name: str) -> Optional[EnrichmentPayload]:
        with self._lock:
            return self._entries.get(cache_key(university_name, department_name))

    def set(self, university_name: str, department_name: str, payload: EnrichmentPayload) -> None:
        with self._lock:
            self._entries[cache_key(university_name, department_name)] = payload

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# Global instance
_cache: Optional[EnrichmentCache] = None


def get_enrichment_cache() -> EnrichmentCache:
    """Get or create the process-wide enrichment cache."""
    global _cache
    if _cache is None:
        _cache = EnrichmentCache()
    return _cache
