"""In-memory TTL cache for TheSportsDB record lookups.

Only id-keyed lookups (teams, leagues) go through this cache. Search and
day-listing responses are always fetched fresh.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

LOGGER = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: Any
    stored_at: float


class LookupCache:
    """Thread-safe TTL cache keyed by ``(category, identifier)``.

    ``None`` results are cached too, so a team id the API does not know is
    not requested again within the TTL.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        max_entries: int = 2048,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[Hashable, _Entry] = {}
        self._lock = threading.Lock()

    def get(self, category: str, key: str) -> tuple[bool, Any]:
        """Return ``(hit, value)`` for a cached lookup."""
        with self._lock:
            entry = self._entries.get((category, key))
            if entry is None:
                return False, None
            if self._clock() - entry.stored_at > self.ttl_seconds:
                del self._entries[(category, key)]
                return False, None
            return True, entry.value

    def set(self, category: str, key: str, value: Any) -> None:
        with self._lock:
            if len(self._entries) >= self.max_entries:
                oldest = min(self._entries, key=lambda item: self._entries[item].stored_at)
                del self._entries[oldest]
            self._entries[(category, key)] = _Entry(value=value, stored_at=self._clock())

    def invalidate(self, category: str | None = None) -> None:
        with self._lock:
            if category is None:
                self._entries.clear()
                return
            for item in [item for item in self._entries if item[0] == category]:
                del self._entries[item]
        LOGGER.debug("Invalidated lookup cache%s", f" for {category}" if category else "")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
