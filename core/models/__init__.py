# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for all health report and config models
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Pydantic models for health reports and runner configuration.
Every report model exposes to_dict() producing the wire format.
"""

from core.models.status_node import StatusNode, now_ms
from core.models.report import PerformanceMetrics, HealthCheckResponse
from core.models.runner_config import AuthConfig, RunnerConfig
from core.models.cache_entry import CacheEntry

__all__ = [
    # Report
    "StatusNode",
    "PerformanceMetrics",
    "HealthCheckResponse",
    "now_ms",
    # Config
    "AuthConfig",
    "RunnerConfig",
    # Cache
    "CacheEntry",
]
