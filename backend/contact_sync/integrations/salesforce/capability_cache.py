"""
Per-org Salesforce capability cache.

Capabilities (e.g. "does this org use coded address fields?") are cached
per instance_url with a TTL so that contact updates don't re-probe the org
schema on every call.

The backing store is created lazily. get/put never raise: a broken or
missing store degrades to a cache miss, which only costs an extra probe.
"""

import logging
import threading
import time
from functools import lru_cache
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from contact_sync.core.config import get_settings

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600.0


class _Miss:
    """Sentinel returned by CapabilityCache.get when no valid entry exists."""

    _instance: Optional["_Miss"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISS"

    def __bool__(self) -> bool:
        return False


MISS = _Miss()


class CapabilityCache:
    """
    TTL cache keyed by org identity.

    Reads and writes are unsynchronized (last write wins); only creation of
    the backing dict is locked so concurrent first callers share one store.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: Optional[Dict[Hashable, Tuple[Any, float]]] = None
        self._init_lock = threading.Lock()

    def _ensure_store(self) -> Dict[Hashable, Tuple[Any, float]]:
        store = self._store
        if store is None:
            with self._init_lock:
                if self._store is None:
                    self._store = {}
                store = self._store
        return store

    def get(self, key: Hashable) -> Any:
        """
        Returns the cached value for `key`, or MISS.

        Expired entries are treated as absent and removed.
        """
        try:
            store = self._ensure_store()
            entry = store.get(key)
            if entry is None:
                return MISS

            value, inserted_at = entry
            if self._clock() - inserted_at < self.ttl_seconds:
                return value

            store.pop(key, None)
            return MISS
        except Exception as e:
            logger.warning(f"⚠️ Capability cache lookup failed for {key!r}: {e}")
            return MISS

    def put(self, key: Hashable, value: Any) -> None:
        """Stores `value` for `key`, replacing any existing entry."""
        try:
            store = self._ensure_store()
            store[key] = (value, self._clock())
        except Exception as e:
            logger.warning(f"⚠️ Capability cache write failed for {key!r}: {e}")

    def clear(self) -> None:
        """Drops every entry."""
        self._ensure_store().clear()

    def __len__(self) -> int:
        return len(self._store or {})


@lru_cache
def get_capability_cache() -> CapabilityCache:
    """
    Get the process-wide capability cache.

    The TTL is read from settings once, on first use.
    """
    return CapabilityCache(ttl_seconds=get_settings().salesforce_capability_ttl_seconds)
