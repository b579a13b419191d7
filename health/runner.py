# ============================================================================
# HEALTH CHECK RUNNER
# ============================================================================
# STATUS: Infrastructure - Bounded parallel check orchestration
# PURPOSE: Auth, run checks concurrently under a global budget, aggregate,
#          sanitize
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Runner

One run:
1. Auth gate (backstop; adapters should have checked already)
2. Launch every check as its own task, cache-aware
3. Race the joined checks against ONE global budget timer
4. Tally completed / failed checks
5. Aggregate overall status with the configured precedence
6. Assemble the report (site-derived id / name, performance metrics)
7. Sanitize with the configured strategy

Failure semantics:
- Auth denial     -> UnauthorizedError, no check runs
- Check fault     -> Unknown node carrying the fault text
- Garbage result  -> Unknown node ("Check returned invalid result")
- Budget overrun  -> single Partial "budget_exceeded" node, every check
                     counted as failed; never an exception

Service order always follows configuration order, whatever order the
checks complete in.
"""

import asyncio
import time
import uuid
from typing import Any, Optional, TypeVar

from pydantic import ValidationError

from core.contracts import BUDGET_EXCEEDED_NODE_ID, HealthStatus
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models import HealthCheckResponse, PerformanceMetrics, RunnerConfig, StatusNode
from health.aggregator import aggregate_status, create_status_node, get_status_message
from health.auth import UnauthorizedError, validate_auth
from health.cache import TTLCache
from health.naming import get_site_display_name, get_site_healthcheck_id, get_site_name
from health.sanitizer import sanitize_response

logger = get_logger(__name__, ComponentType.RUNNER)

T = TypeVar("T")

CACHE_KEY_PREFIX = "check:"


def cache_key(check_id: str) -> str:
    return f"{CACHE_KEY_PREFIX}{check_id}"


class HealthCheckRunner:
    """
    Executes a RunnerConfig into a sanitized HealthCheckResponse.

    The cache is owned by the runner instance; reuse one runner across
    requests for cache_ms to have any effect.
    """

    def __init__(self, cache: Optional[TTLCache] = None):
        """
        Initialize runner.

        Args:
            cache: Check result cache (a private TTLCache if None)
        """
        self.cache = cache if cache is not None else TTLCache()

    async def run(
        self,
        config: RunnerConfig,
        request: Any = None,
        pre_authorized: bool = False,
    ) -> HealthCheckResponse:
        """
        Run every configured check and build the report.

        Args:
            config: Checks, budget, cache, auth and sanitization
            request: Request-like value for auth and site naming
            pre_authorized: Caller already ran validate_auth(); skip the
                backstop so custom validators run once per request

        Raises:
            UnauthorizedError: the auth backstop denied the request
        """
        with log_context(run_id=uuid.uuid4().hex[:12], site=get_site_name(request)):
            return await self._run(config, request, pre_authorized)

    async def _run(
        self,
        config: RunnerConfig,
        request: Any,
        pre_authorized: bool,
    ) -> HealthCheckResponse:
        start_time = time.monotonic()

        if not pre_authorized:
            auth_result = validate_auth(request, config.auth)
            if not auth_result.authorized:
                raise UnauthorizedError(auth_result.reason)

        # Tasks copy the current log context when created
        checks = list(config.checks)
        tasks = [
            asyncio.ensure_future(self._execute_check(check, config.cache_ms))
            for check in checks
        ]

        pending = set()
        if tasks:
            _, pending = await asyncio.wait(tasks, timeout=config.budget_ms / 1000)

        if pending:
            logger.warning(
                f"Health check budget ({config.budget_ms}ms) exceeded, "
                f"{len(pending)}/{len(checks)} checks still running"
            )
            if config.cancel_on_budget:
                for task in pending:
                    task.cancel()
            services = [_budget_exceeded_node(config.budget_ms)]
            checks_completed = 0
            checks_failed = len(checks)
        else:
            services = [task.result() for task in tasks]
            checks_completed = len(services)
            checks_failed = sum(1 for node in services if node.status.is_failure())

        overall_status = aggregate_status(services, config.aggregation_precedence)
        total_check_time = int((time.monotonic() - start_time) * 1000)

        response = HealthCheckResponse(
            id=get_site_healthcheck_id(request),
            name=get_site_display_name(request),
            status=overall_status,
            message=get_status_message(overall_status),
            performance=PerformanceMetrics(
                total_check_time=total_check_time,
                checks_completed=checks_completed,
                checks_failed=checks_failed,
            ),
            services=services,
        )

        log_checkpoint(
            "health_run_completed",
            data={
                "status": overall_status.value,
                "total_check_time": total_check_time,
                "checks_completed": checks_completed,
                "checks_failed": checks_failed,
                "budget_exceeded": bool(pending),
            },
            logger=logger,
        )

        return sanitize_response(response, config.sanitize)

    async def run_single(
        self,
        config: RunnerConfig,
        check_id: str,
        request: Any = None,
        pre_authorized: bool = False,
    ) -> Optional[HealthCheckResponse]:
        """Run one configured check by id (None if no such check)."""
        for check in config.checks:
            if check.id == check_id:
                scoped = config.model_copy(update={"checks": [check]})
                return await self.run(scoped, request, pre_authorized)
        return None

    async def _execute_check(self, check: Any, cache_ms: int) -> StatusNode:
        """Execute a single check, consulting the cache; never raises."""
        with log_context(check_id=check.id):
            return await self._run_check(check, cache_ms)

    async def _run_check(self, check: Any, cache_ms: int) -> StatusNode:
        key = cache_key(check.id)
        if cache_ms > 0:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Cache hit for {check.id}")
                return cached.model_copy(deep=True)

        start_time = time.monotonic()
        try:
            result = await check.run()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Health check {check.id} failed: {type(e).__name__}: {e}")
            return create_status_node(
                check.id,
                check.name,
                HealthStatus.UNKNOWN,
                f"Check error: {str(e) or type(e).__name__}",
            )

        node = _coerce_node(result)
        if node is None:
            logger.error(
                f"Health check {check.id} returned {type(result).__name__}, not a StatusNode"
            )
            return create_status_node(
                check.id,
                check.name,
                HealthStatus.UNKNOWN,
                "Check returned invalid result",
            )

        duration_ms = (time.monotonic() - start_time) * 1000
        logger.debug(f"Health check {check.id}: {node.status.value} ({duration_ms:.1f}ms)")

        if cache_ms > 0:
            self.cache.set(key, node.model_copy(deep=True), cache_ms)
        return node


def _coerce_node(result: Any) -> Optional[StatusNode]:
    if isinstance(result, StatusNode):
        return result
    try:
        return StatusNode.model_validate(result)
    except ValidationError:
        return None


def _budget_exceeded_node(budget_ms: int) -> StatusNode:
    return create_status_node(
        BUDGET_EXCEEDED_NODE_ID,
        "Budget Exceeded",
        HealthStatus.PARTIAL,
        f"Health check exceeded {budget_ms}ms budget",
    )


async def with_timeout(awaitable, timeout_ms: int, timeout_value: T) -> T:
    """Await with a deadline, returning timeout_value instead of raising."""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_ms / 1000)
    except asyncio.TimeoutError:
        return timeout_value


async def run_health_check(
    config: RunnerConfig,
    request: Any = None,
    cache: Optional[TTLCache] = None,
) -> HealthCheckResponse:
    """Convenience wrapper: one run with an optional shared cache."""
    return await HealthCheckRunner(cache=cache).run(config, request)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HealthCheckRunner",
    "run_health_check",
    "with_timeout",
    "cache_key",
]
