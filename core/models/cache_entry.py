# ============================================================================
# CACHE ENTRY MODEL
# ============================================================================
# STATUS: Core model - TTL cache slot
# PURPOSE: Value plus absolute expiry instant
# CREATED: 18 OCT 2026
# ============================================================================
"""Cache entry stored by health.cache.TTLCache."""

from dataclasses import dataclass
from typing import Any


@dataclass
class CacheEntry:
    """A cached value and the clock reading after which it is stale."""
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


__all__ = ["CacheEntry"]
