# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export core contracts and models
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================

from core.contracts import HealthStatus, SanitizeStrategy, DEFAULT_PRECEDENCE
from core.models import (
    StatusNode,
    PerformanceMetrics,
    HealthCheckResponse,
    AuthConfig,
    RunnerConfig,
    CacheEntry,
)

__all__ = [
    # Enums
    "HealthStatus",
    "SanitizeStrategy",
    "DEFAULT_PRECEDENCE",
    # Models
    "StatusNode",
    "PerformanceMetrics",
    "HealthCheckResponse",
    "AuthConfig",
    "RunnerConfig",
    "CacheEntry",
]
