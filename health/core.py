# ============================================================================
# HEALTH CHECK CORE TYPES
# ============================================================================
# STATUS: Infrastructure - Check plugin interface
# PURPOSE: Base class every check implements
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Core Types

A check is anything with:
    id: str      stable key, unique within a RunnerConfig
    name: str    human label
    async run() -> StatusNode

HealthCheck is the convenience base class; the runner only relies on the
duck-typed contract above. Checks should catch their own failures and
report them as nodes, but the runner contains anything that escapes.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from core.contracts import HealthStatus
from core.models import StatusNode
from health.aggregator import create_status_node


class HealthCheck(ABC):
    """
    Base class for health checks.

    Subclass and implement run() to create custom checks.

    Example:
        class QueueCheck(HealthCheck):
            id = "queue"
            name = "Message Queue"

            async def run(self) -> StatusNode:
                depth = await queue.depth()
                return self.node(HealthStatus.UP, f"{depth} messages", depth=depth)
    """

    id: str = "unnamed"
    name: str = "Unnamed Check"

    @abstractmethod
    async def run(self) -> StatusNode:
        """
        Execute the check.

        Returns:
            StatusNode describing this check (may carry children)
        """

    def node(self, status: HealthStatus, message: str, **metadata) -> StatusNode:
        """Build a leaf node for this check."""
        return create_status_node(self.id, self.name, status, message, metadata=metadata)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"


class FunctionCheck(HealthCheck):
    """Wrap an async callable as a check."""

    def __init__(
        self,
        id: str,
        name: str,
        fn: Callable[[], Awaitable[StatusNode]],
        description: Optional[str] = None,
    ):
        self.id = id
        self.name = name
        self.description = description
        self._fn = fn

    async def run(self) -> StatusNode:
        return await self._fn()


__all__ = ["HealthCheck", "FunctionCheck"]
