# ============================================================================
# HEALTHGATE - MAIN APPLICATION
# ============================================================================
# STATUS: Core - FastAPI application entry point
# PURPOSE: Serve the health endpoints for a configured template
# CREATED: 18 OCT 2026
# ============================================================================
"""
Healthgate Main Application

FastAPI application that:
1. Builds a RunnerConfig from a template (HEALTHCHECK_TEMPLATE)
2. Serves /livez, /health and /health/{check_id}
3. Sweeps expired cache entries in the background

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from __version__ import __version__, BUILD_DATE
from core.config import RunnerDefaults, get_environment
from core.logging import configure_logging, get_logger
from health import HealthCheckRunner, TTLCache, create_health_router
from health.templates import TEMPLATES

configure_logging()
logger = get_logger(__name__)

template_name = os.environ.get("HEALTHCHECK_TEMPLATE", "default")
if template_name not in TEMPLATES:
    raise ValueError(
        f"Unknown HEALTHCHECK_TEMPLATE {template_name!r}, expected one of {sorted(TEMPLATES)}"
    )

config = TEMPLATES[template_name]()
cache = TTLCache()
runner = HealthCheckRunner(cache=cache)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Starts the cache sweeper on startup, stops it on shutdown.
    """
    logger.info(
        f"Starting Healthgate v{__version__} (Build {BUILD_DATE}, "
        f"environment={get_environment()}, template={template_name}, "
        f"{len(config.checks)} checks)"
    )
    cache.start_sweeper(RunnerDefaults.from_env().sweep_interval_seconds)

    yield

    logger.info("Shutting down Healthgate...")
    await cache.stop_sweeper()


app = FastAPI(
    title="Healthgate",
    description="Health check orchestration engine",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(create_health_router(config, runner=runner))


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "Healthgate",
        "version": __version__,
        "build_date": BUILD_DATE,
        "status": "running",
        "docs": "/docs",
    }


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=os.environ.get("RELOAD", "false").lower() == "true",
    )
