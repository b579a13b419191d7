# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for runner budget, caching, auth, sweeping
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides sensible defaults for the health check engine.
These can be overridden via environment variables or RunnerConfig fields.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Production-like detection drives secure-by-default auth
"""

import os
from dataclasses import dataclass
from typing import Optional


PRODUCTION_ENVIRONMENTS = ("production", "prod")


def get_environment() -> str:
    """Current deployment environment name (lower-cased)."""
    return (
        os.getenv("ENVIRONMENT")
        or os.getenv("APP_ENV")
        or "development"
    ).strip().lower()


def is_production() -> bool:
    """True when running in a production-like environment."""
    return get_environment() in PRODUCTION_ENVIRONMENTS


def _env_flag(name: str) -> Optional[bool]:
    """Parse a boolean environment flag (None when unset)."""
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class RunnerDefaults:
    """
    Defaults for a health check run.

    Controls the global budget, result caching and the cache sweeper.
    """
    budget_ms: int = 5000
    cache_ms: int = 0  # 0 = caching disabled
    sanitize: str = "none"
    cancel_on_budget: bool = True
    sweep_interval_seconds: float = 60.0

    @classmethod
    def from_env(cls) -> "RunnerDefaults":
        """Create from environment variables."""
        return cls(
            budget_ms=int(os.getenv("HEALTHCHECK_BUDGET_MS", 5000)),
            cache_ms=int(os.getenv("HEALTHCHECK_CACHE_MS", 0)),
            sanitize=os.getenv(
                "HEALTHCHECK_SANITIZE",
                "counts-only" if is_production() else "none",
            ),
            sweep_interval_seconds=float(os.getenv("HEALTHCHECK_SWEEP_INTERVAL", 60)),
        )


@dataclass(frozen=True)
class AuthDefaults:
    """
    Environment-aware auth defaults.

    Secure in production, convenient in development.
    """
    token: Optional[str] = None
    require_auth: bool = False
    strict_mode: bool = False
    allow_query_token: bool = False

    @classmethod
    def from_env(cls) -> "AuthDefaults":
        """Create from environment variables."""
        production = is_production()
        forced = _env_flag("REQUIRE_HEALTHCHECK_AUTH")
        return cls(
            token=os.getenv("HEALTHCHECK_TOKEN") or None,
            require_auth=production or bool(forced),
            strict_mode=production,
            allow_query_token=bool(_env_flag("HEALTHCHECK_ALLOW_QUERY_TOKEN")),
        )
