# ============================================================================
# STATUS AGGREGATOR
# ============================================================================
# STATUS: Infrastructure - Precedence-based status reduction
# PURPOSE: Reduce child statuses to one status + message; node helpers
# CREATED: 18 OCT 2026
# ============================================================================
"""
Status Aggregator

Aggregation is first-match-wins over a precedence list, not a vote:

    precedence = [Down, Partial, Unknown, Up]   (default)
    -> the first status in the list carried by ANY node is the result

Edge cases:
- No nodes          -> Unknown (no information is not "healthy")
- No status matched -> Up if every node is Up, otherwise Partial

Callers reorder precedence to tune caution, e.g. [Down, Unknown, Partial, Up]
treats an undeterminable check as worse than a degraded one.
"""

import time
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Sequence, Tuple, TypeVar

from core.contracts import DEFAULT_PRECEDENCE, HealthStatus
from core.models import StatusNode

T = TypeVar("T")


STATUS_MESSAGES: Dict[HealthStatus, str] = {
    HealthStatus.UP: "All systems operational",
    HealthStatus.PARTIAL: "Some services degraded",
    HealthStatus.DOWN: "Critical services unavailable",
    HealthStatus.UNKNOWN: "Unable to determine status",
}


def aggregate_status(
    nodes: Iterable[StatusNode],
    precedence: Optional[Sequence[HealthStatus]] = None,
) -> HealthStatus:
    """Aggregate node statuses using first-match precedence."""
    statuses = {HealthStatus(node.status) for node in nodes or ()}
    if not statuses:
        return HealthStatus.UNKNOWN

    for status in precedence if precedence is not None else DEFAULT_PRECEDENCE:
        status = HealthStatus(status)
        if status in statuses:
            return status

    # Precedence list is incomplete
    if statuses == {HealthStatus.UP}:
        return HealthStatus.UP
    return HealthStatus.PARTIAL


def get_status_message(status: HealthStatus, prefix: Optional[str] = None) -> str:
    """Human summary for a status, optionally as '<prefix>: <message>'."""
    message = STATUS_MESSAGES.get(HealthStatus(status), "Status unknown")
    if prefix:
        return f"{prefix}: {message}"
    return message


def create_status_node(
    id: str,
    name: str,
    status: HealthStatus,
    message: str,
    services: Optional[Sequence[StatusNode]] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> StatusNode:
    """Create a node stamped with the current time; empty services/metadata are omitted."""
    return StatusNode(
        id=id,
        name=name,
        status=status,
        message=message,
        services=list(services) if services else None,
        metadata=dict(metadata) if metadata else None,
    )


def create_group_node(
    id: str,
    name: str,
    services: Sequence[StatusNode],
    precedence: Optional[Sequence[HealthStatus]] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> StatusNode:
    """Create a group node whose status and message are aggregated from its children."""
    status = aggregate_status(services, precedence)
    return create_status_node(
        id,
        name,
        status,
        get_status_message(status, name),
        services=services,
        metadata=metadata,
    )


async def measure_time(fn: Callable[[], Awaitable[T]]) -> Tuple[T, float]:
    """
    Await fn() and measure it.

    Returns:
        (result, duration_ms)
    """
    start = time.monotonic()
    result = await fn()
    return result, (time.monotonic() - start) * 1000


__all__ = [
    "STATUS_MESSAGES",
    "aggregate_status",
    "get_status_message",
    "create_status_node",
    "create_group_node",
    "measure_time",
]
