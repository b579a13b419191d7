# ============================================================================
# STATUS NODE MODEL
# ============================================================================
# STATUS: Core model - Recursive check result
# PURPOSE: One node in the health report tree (leaf or group)
# CREATED: 18 OCT 2026
# EXPORTS: StatusNode, now_ms
# DEPENDENCIES: pydantic
# ============================================================================
"""
Status Node Model

StatusNode is the unit every check produces and the report is built from.

Key concept:
- Leaf node  = one concrete check (an endpoint, an env var group)
- Group node = a node with `services` children and an aggregated status

Wire contract:
- `services` and `metadata` are OMITTED from to_dict() when empty.
  Consumers rely on field absence, so empty lists/dicts are normalised
  to None at validation time.
"""

import time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.contracts import HealthStatus


def now_ms() -> int:
    """Current wall-clock instant as epoch milliseconds."""
    return int(time.time() * 1000)


class StatusNode(BaseModel):
    """
    Result record for one check or sub-check.

    Status consistency between a group and its children is the job of
    the aggregator; it is not validated here.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(
        min_length=1,
        max_length=128,
        description="Stable machine-readable key, unique among siblings"
    )
    name: str = Field(description="Human label")
    status: HealthStatus
    message: str = Field(default="", description="Human-readable summary")
    timestamp: int = Field(
        default_factory=now_ms,
        description="Capture instant (epoch ms)"
    )
    services: Optional[List["StatusNode"]] = Field(
        default=None,
        description="Ordered child nodes (absent when empty)"
    )
    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Check-specific diagnostics (absent when empty)"
    )

    @field_validator("services", "metadata")
    @classmethod
    def _empty_to_none(cls, value):
        return value or None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "timestamp": self.timestamp,
        }
        if self.services:
            result["services"] = [child.to_dict() for child in self.services]
        if self.metadata:
            result["metadata"] = self.metadata
        return result

    def walk(self):
        """Yield this node and every descendant, depth-first."""
        yield self
        for child in self.services or []:
            yield from child.walk()


StatusNode.model_rebuild()


__all__ = ["StatusNode", "now_ms"]
