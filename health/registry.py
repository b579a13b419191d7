# ============================================================================
# HEALTH CHECK REGISTRY
# ============================================================================
# STATUS: Infrastructure - Check registration
# PURPOSE: Register checks and compose them into a RunnerConfig
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Registry

Manages registration of checks. Registration order is report order.

Usage:
    # Decorator registration
    @register_check(id="queue", name="Message Queue")
    class QueueCheck(HealthCheck):
        ...

    # Manual registration
    registry = get_registry()
    registry.register(BuildCheck(critical_env=["DATABASE_URL"]))

    # Compose a run
    config = registry.build_config(budget_ms=3000, cache_ms=30000)
"""

from typing import Any, Dict, List, Optional, Type

from core.logging import ComponentType, get_logger
from core.models import RunnerConfig
from health.core import HealthCheck

logger = get_logger(__name__, ComponentType.RUNNER)


class HealthCheckRegistry:
    """
    Ordered collection of checks keyed by id.

    Re-registering an id replaces the check in place, keeping its position.
    """

    def __init__(self):
        self._checks: Dict[str, Any] = {}

    def register(self, check: Any) -> None:
        """
        Register a check instance.

        Args:
            check: Object with id, name and async run()
        """
        if check.id in self._checks:
            logger.warning(f"Overwriting health check: {check.id}")

        self._checks[check.id] = check
        logger.debug(f"Registered health check: {check.id} ({check.name})")

    def register_class(self, check_class: Type[HealthCheck], **kwargs) -> HealthCheck:
        """Instantiate and register a check class."""
        instance = check_class(**kwargs)
        self.register(instance)
        return instance

    def unregister(self, check_id: str) -> bool:
        """
        Remove a check by id.

        Returns:
            True if the check was removed
        """
        return self._checks.pop(check_id, None) is not None

    def get(self, check_id: str) -> Optional[Any]:
        return self._checks.get(check_id)

    def get_all(self) -> List[Any]:
        """All checks in registration order."""
        return list(self._checks.values())

    def build_config(self, **overrides) -> RunnerConfig:
        """Create a RunnerConfig over the registered checks."""
        return RunnerConfig(checks=self.get_all(), **overrides)

    def clear(self) -> None:
        self._checks.clear()

    def __len__(self) -> int:
        return len(self._checks)

    def __contains__(self, check_id: str) -> bool:
        return check_id in self._checks


# ============================================================================
# GLOBAL REGISTRY & DECORATOR
# ============================================================================

_registry: Optional[HealthCheckRegistry] = None


def get_registry() -> HealthCheckRegistry:
    """Get the global health check registry."""
    global _registry
    if _registry is None:
        _registry = HealthCheckRegistry()
    return _registry


def register_check(
    id: Optional[str] = None,
    name: Optional[str] = None,
    registry: Optional[HealthCheckRegistry] = None,
    **init_kwargs,
):
    """
    Decorator to register a check class.

    Args:
        id: Override the class id
        name: Override the class name
        registry: Target registry (global if None)
        **init_kwargs: Passed to the class constructor

    Example:
        @register_check(id="queue")
        class QueueCheck(HealthCheck):
            name = "Message Queue"

            async def run(self) -> StatusNode:
                ...
    """
    def decorator(cls: Type[HealthCheck]) -> Type[HealthCheck]:
        if id is not None:
            cls.id = id
        if name is not None:
            cls.name = name

        target = registry if registry is not None else get_registry()
        target.register_class(cls, **init_kwargs)
        return cls

    return decorator


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HealthCheckRegistry",
    "get_registry",
    "register_check",
]
