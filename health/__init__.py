# ============================================================================
# HEALTH CHECK MODULE
# ============================================================================
# STATUS: Infrastructure - Health check orchestration engine
# PURPOSE: Bounded parallel checks, aggregation, auth and sanitization
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Module

Pluggable health check engine:
- HealthCheck: Base class for checks
- HealthCheckRunner: Parallel execution under one global budget
- aggregate_status: Precedence-based status reduction
- validate_auth: Constant-time token gate
- sanitize_response: Redaction before the report leaves the process
- create_health_router: FastAPI endpoints

Usage:
    from health import HealthCheckRunner, BuildCheck
    from core.models import RunnerConfig

    config = RunnerConfig(
        checks=[BuildCheck(critical_env=["DATABASE_URL"])],
        budget_ms=3000,
        sanitize="counts-only",
    )
    report = await HealthCheckRunner().run(config, request)

    # Mount router
    app.include_router(create_health_router(config))
"""

from health.aggregator import (
    aggregate_status,
    get_status_message,
    create_status_node,
    create_group_node,
    measure_time,
)
from health.auth import (
    UNAUTHORIZED,
    UnauthorizedError,
    AuthResult,
    validate_auth,
    create_unauthorized_response,
)
from health.cache import TTLCache
from health.core import HealthCheck, FunctionCheck
from health.registry import HealthCheckRegistry, register_check, get_registry
from health.runner import HealthCheckRunner, run_health_check, with_timeout
from health.sanitizer import sanitize_response
from health.checks import BuildCheck, HttpCheck, PagesCheck, SearchIndexCheck
from health.router import create_health_router

__all__ = [
    # Aggregation
    "aggregate_status",
    "get_status_message",
    "create_status_node",
    "create_group_node",
    "measure_time",
    # Auth
    "UNAUTHORIZED",
    "UnauthorizedError",
    "AuthResult",
    "validate_auth",
    "create_unauthorized_response",
    # Cache
    "TTLCache",
    # Checks
    "HealthCheck",
    "FunctionCheck",
    "BuildCheck",
    "HttpCheck",
    "PagesCheck",
    "SearchIndexCheck",
    # Registry
    "HealthCheckRegistry",
    "register_check",
    "get_registry",
    # Runner
    "HealthCheckRunner",
    "run_health_check",
    "with_timeout",
    # Sanitizer
    "sanitize_response",
    # Router
    "create_health_router",
]
