# ============================================================================
# HEALTH CHECK REPORT MODEL
# ============================================================================
# STATUS: Core model - Top-level report
# PURPOSE: Overall status, performance metrics and one node per check
# CREATED: 18 OCT 2026
# EXPORTS: PerformanceMetrics, HealthCheckResponse
# DEPENDENCIES: pydantic
# ============================================================================
"""
Health Check Report Model

HealthCheckResponse is constructed fresh per run, passed once through the
sanitizer, and never mutated afterwards.

Wire field names are camelCase (totalCheckTime, checksCompleted,
checksFailed); Python attributes are snake_case.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from core.contracts import HealthStatus
from core.models.status_node import StatusNode, now_ms


class PerformanceMetrics(BaseModel):
    """Timing and tallies for one run."""

    model_config = ConfigDict(populate_by_name=True)

    total_check_time: int = Field(
        default=0,
        ge=0,
        alias="totalCheckTime",
        description="Wall-clock time for the whole run (ms)"
    )
    checks_completed: int = Field(default=0, ge=0, alias="checksCompleted")
    checks_failed: int = Field(default=0, ge=0, alias="checksFailed")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class HealthCheckResponse(BaseModel):
    """
    Complete health report.

    `services` holds one top-level node per configured check, in
    configuration order (or the single budget marker node).
    """

    id: str
    name: str
    status: HealthStatus
    message: str
    timestamp: int = Field(default_factory=now_ms)
    performance: PerformanceMetrics = Field(default_factory=PerformanceMetrics)
    services: List[StatusNode] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "timestamp": self.timestamp,
            "performance": self.performance.to_dict(),
            "services": [node.to_dict() for node in self.services],
        }

    def find_service(self, node_id: str):
        """Find a node anywhere in the tree by id (None if absent)."""
        for top in self.services:
            for node in top.walk():
                if node.id == node_id:
                    return node
        return None


__all__ = ["PerformanceMetrics", "HealthCheckResponse"]
