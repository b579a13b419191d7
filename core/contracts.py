# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Core enums shared by every health component
# PURPOSE: Status values, sanitization strategies, reserved node ids
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: HealthStatus, SanitizeStrategy, DEFAULT_PRECEDENCE
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the health check engine.

These values cross every boundary:
- Check output (StatusNode.status)
- Aggregation (precedence lists)
- Wire format (JSON report served to monitoring tools)

Status values carry no implicit ordering. Ordering is always supplied
externally as a precedence list (see DEFAULT_PRECEDENCE).
"""

from enum import Enum
from typing import List


# ============================================================================
# STATUS ENUMS
# ============================================================================

class HealthStatus(str, Enum):
    """
    Four-valued status of a check or of a whole report.

    Wire values are capitalised to match what monitoring dashboards
    already parse.
    """
    UP = "Up"                # Operational
    DOWN = "Down"            # Critical failure
    PARTIAL = "Partial"      # Degraded / some children failing
    UNKNOWN = "Unknown"      # No information (fault, empty input)

    def is_failure(self) -> bool:
        """Check if this status counts as a failed check in metrics."""
        return self in (HealthStatus.DOWN, HealthStatus.UNKNOWN)


class SanitizeStrategy(str, Enum):
    """
    Redaction strategies applied to a report before it leaves the process.

    NONE:          identity
    COUNTS_ONLY:   drop variable names, generic error messages, coarse timing
    REDACT_VALUES: mask variable names, strip URL query strings
    """
    NONE = "none"
    COUNTS_ONLY = "counts-only"
    REDACT_VALUES = "redact-values"


# Worst-first. First status present among the nodes wins.
DEFAULT_PRECEDENCE: List[HealthStatus] = [
    HealthStatus.DOWN,
    HealthStatus.PARTIAL,
    HealthStatus.UNKNOWN,
    HealthStatus.UP,
]


# ============================================================================
# RESERVED NODE IDS
# ============================================================================

BUDGET_EXCEEDED_NODE_ID = "budget_exceeded"

# Stable ids emitted by the build check; the sanitizer keys off these
ENV_VARS_NODE_ID = "env_vars"
BUILD_ARTIFACTS_NODE_ID = "build_artifacts"


__all__ = [
    "HealthStatus",
    "SanitizeStrategy",
    "DEFAULT_PRECEDENCE",
    "BUDGET_EXCEEDED_NODE_ID",
    "ENV_VARS_NODE_ID",
    "BUILD_ARTIFACTS_NODE_ID",
]
