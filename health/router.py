# ============================================================================
# HEALTH CHECK ROUTER
# ============================================================================
# STATUS: Infrastructure - FastAPI adapter for the runner
# PURPOSE: Map HTTP requests to runner inputs and reports to responses
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Router

FastAPI router built around one RunnerConfig:

Endpoints:
    GET /livez              - Liveness check (no checks, no auth)
    GET /health             - Full report (auth required per AuthConfig)
    GET /health/{check_id}  - Report scoped to one check

Response Codes:
    200 - Up / Partial / Unknown
    401 - Auth denied (strict mode: {"error": "Unauthorized"} only)
    404 - Unknown check id
    503 - Down

The router checks auth once, before running anything, and calls the runner
with pre_authorized=True so the runner does not repeat the check. A
custom_validator therefore runs exactly once per request.
"""

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from __version__ import __version__, BUILD_DATE
from core.contracts import HealthStatus
from core.logging import ComponentType, get_logger
from core.models import AuthConfig, HealthCheckResponse, RunnerConfig
from health.auth import create_unauthorized_response, validate_auth
from health.runner import HealthCheckRunner

logger = get_logger(__name__, ComponentType.API)

NO_CACHE_HEADERS = {"Cache-Control": "no-cache, no-store, must-revalidate"}


def _status_to_http_code(status: HealthStatus) -> int:
    """Map report status to HTTP status code."""
    return 503 if status == HealthStatus.DOWN else 200


def _unauthorized(config: RunnerConfig) -> JSONResponse:
    auth = config.auth if config.auth is not None else AuthConfig()
    denial = create_unauthorized_response(auth.resolved_strict_mode())
    return JSONResponse(
        status_code=denial["status_code"],
        content=denial["body"],
        headers=NO_CACHE_HEADERS,
    )


def _report(result: HealthCheckResponse) -> JSONResponse:
    return JSONResponse(
        status_code=_status_to_http_code(result.status),
        content=jsonable_encoder(result.to_dict()),
        headers=NO_CACHE_HEADERS,
    )


def create_health_router(
    config: RunnerConfig,
    runner: Optional[HealthCheckRunner] = None,
    prefix: str = "",
) -> APIRouter:
    """
    Build the health endpoints for a config.

    Args:
        config: Checks, budget, auth and sanitization for every request
        runner: Shared runner (owns the result cache); new one if None
        prefix: Router prefix
    """
    runner = runner or HealthCheckRunner()
    router = APIRouter(prefix=prefix, tags=["Health"])

    @router.get("/livez")
    async def liveness():
        """Process is alive. No checks, no auth."""
        return {"status": "alive", "version": __version__, "build_date": BUILD_DATE}

    @router.get("/health")
    async def full_health_check(request: Request):
        """Run every check and return the sanitized report."""
        if not validate_auth(request, config.auth).authorized:
            return _unauthorized(config)
        result = await runner.run(config, request, pre_authorized=True)
        return _report(result)

    @router.get("/health/{check_id}")
    async def single_health_check(check_id: str, request: Request):
        """Run a single check by id."""
        if not validate_auth(request, config.auth).authorized:
            return _unauthorized(config)
        result = await runner.run_single(config, check_id, request, pre_authorized=True)
        if result is None:
            logger.info(f"Unknown health check requested: {check_id}")
            return JSONResponse(
                status_code=404,
                content={"error": "Health check not found"},
                headers=NO_CACHE_HEADERS,
            )
        return _report(result)

    return router


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "create_health_router",
]
