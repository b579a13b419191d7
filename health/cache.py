# ============================================================================
# CHECK RESULT CACHE
# ============================================================================
# STATUS: Infrastructure - In-memory TTL cache
# PURPOSE: Short-lived reuse of expensive check results between runs
# CREATED: 18 OCT 2026
# ============================================================================
"""
Check Result Cache

Pure TTL cache: no size bound, no LRU. Check result sets are small and
short-lived, so expiry is the only eviction policy.

Expiry is checked lazily on every get(), so correctness never depends on
the background sweeper having run. The sweeper only keeps memory tidy.

The cache is constructed explicitly and handed to the runner; there is no
module-level singleton.

Usage:
    cache = TTLCache()
    cache.set("check:build", node, ttl_ms=60000)
    cache.get("check:build")      # node, or None once expired
"""

import asyncio
import threading
import time
from typing import Any, Callable, Dict, Optional

from core.logging import ComponentType, get_logger
from core.models import CacheEntry

logger = get_logger(__name__, ComponentType.CACHE)


class TTLCache:
    """
    Thread-safe key -> value store with per-entry TTL.

    Args:
        clock: Monotonic clock in seconds (injectable for tests)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._sweeper: Optional[asyncio.Task] = None

    def get(self, key: str) -> Optional[Any]:
        """Get a value if present and not expired (expired entries are evicted)."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        """Store a value for ttl_ms milliseconds from now."""
        expires_at = self._clock() + ttl_ms / 1000.0
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=expires_at)

    def clear(self, key: Optional[str] = None) -> None:
        """Clear one key, or every key when key is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def size(self) -> int:
        """Number of stored entries (expired ones count until evicted)."""
        with self._lock:
            return len(self._entries)

    def cleanup(self) -> int:
        """
        Sweep all expired entries.

        Returns:
            Number of entries evicted
        """
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(f"Cache sweep evicted {len(expired)} entries")
        return len(expired)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    # =========================================================================
    # BACKGROUND SWEEPER
    # =========================================================================

    def start_sweeper(self, interval_seconds: float = 60.0) -> asyncio.Task:
        """Start periodic cleanup() on the running event loop."""
        if self._sweeper is not None and not self._sweeper.done():
            return self._sweeper
        self._sweeper = asyncio.get_running_loop().create_task(
            self._sweep_loop(interval_seconds)
        )
        return self._sweeper

    async def stop_sweeper(self) -> None:
        """Cancel the periodic sweep, if running."""
        task, self._sweeper = self._sweeper, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _sweep_loop(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            self.cleanup()


__all__ = ["TTLCache"]
