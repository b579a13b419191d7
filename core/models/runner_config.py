# ============================================================================
# RUNNER CONFIGURATION MODELS
# ============================================================================
# STATUS: Core model - Composition input for a health check run
# PURPOSE: Check list, budget, caching, precedence, auth, sanitization
# CREATED: 18 OCT 2026
# EXPORTS: AuthConfig, RunnerConfig
# DEPENDENCIES: pydantic
# ============================================================================
"""
Runner Configuration Models

RunnerConfig is the only input the runner needs besides the request.
Structural problems (negative budget, duplicate check ids, objects that
do not look like checks) are rejected here with a ValidationError, so the
runner itself never has to raise for bad configuration.

AuthConfig fields left as None resolve against the environment at
evaluation time (see core.config.defaults.AuthDefaults).
"""

from typing import Any, Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.config.defaults import AuthDefaults, RunnerDefaults
from core.contracts import DEFAULT_PRECEDENCE, HealthStatus, SanitizeStrategy


class AuthConfig(BaseModel):
    """
    Token-based access control for the health endpoint.

    Token sources, in priority order:
    - Authorization: Bearer <token>   (recommended)
    - X-Healthcheck-Token: <token>
    - ?token=<token>                  (only if allow_query_token)
    - Authorization: Basic <base64>   (password field, compatibility)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    token: Optional[str] = Field(default=None, description="Shared secret")
    require_auth: Optional[bool] = Field(
        default=None,
        description="None = required only in production-like environments"
    )
    allow_query_token: bool = False
    strict_mode: Optional[bool] = Field(
        default=None,
        description="None = strict only in production-like environments"
    )
    custom_validator: Optional[Callable[[Any], bool]] = Field(
        default=None,
        description="Overrides token validation entirely when set"
    )
    on_auth_failure: Optional[Callable[[Any, str], None]] = Field(
        default=None,
        description="Notification hook, receives (request, reason)"
    )

    def resolved_require_auth(self) -> bool:
        if self.require_auth is not None:
            return self.require_auth
        return AuthDefaults.from_env().require_auth

    def resolved_strict_mode(self) -> bool:
        if self.strict_mode is not None:
            return self.strict_mode
        return AuthDefaults.from_env().strict_mode

    @classmethod
    def from_env(cls) -> "AuthConfig":
        """Build from HEALTHCHECK_* environment variables."""
        defaults = AuthDefaults.from_env()
        return cls(
            token=defaults.token,
            allow_query_token=defaults.allow_query_token,
        )


class RunnerConfig(BaseModel):
    """
    Everything a single health check run needs.

    `checks` holds check objects: anything with string `id` / `name`
    attributes and an async `run()` returning a StatusNode.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    checks: List[Any] = Field(default_factory=list)
    budget_ms: int = Field(default=RunnerDefaults.budget_ms, gt=0)
    cache_ms: int = Field(default=RunnerDefaults.cache_ms, ge=0)
    aggregation_precedence: List[HealthStatus] = Field(
        default_factory=lambda: list(DEFAULT_PRECEDENCE)
    )
    auth: Optional[AuthConfig] = None
    sanitize: SanitizeStrategy = SanitizeStrategy.NONE
    cancel_on_budget: bool = Field(
        default=RunnerDefaults.cancel_on_budget,
        description="Cancel in-flight checks when the budget fires"
    )

    @field_validator("checks")
    @classmethod
    def _validate_checks(cls, checks: List[Any]) -> List[Any]:
        seen = set()
        for index, check in enumerate(checks):
            check_id = getattr(check, "id", None)
            if not isinstance(check_id, str) or not check_id:
                raise ValueError(f"checks[{index}] has no string id")
            if not isinstance(getattr(check, "name", None), str):
                raise ValueError(f"checks[{index}] ({check_id}) has no string name")
            if not callable(getattr(check, "run", None)):
                raise ValueError(f"checks[{index}] ({check_id}) has no run() method")
            if check_id in seen:
                raise ValueError(f"Duplicate check id: {check_id}")
            seen.add(check_id)
        return checks

    @classmethod
    def from_env(cls, checks: Optional[List[Any]] = None, **overrides) -> "RunnerConfig":
        """Build from HEALTHCHECK_* environment variables plus overrides."""
        defaults = RunnerDefaults.from_env()
        values = {
            "checks": checks or [],
            "budget_ms": defaults.budget_ms,
            "cache_ms": defaults.cache_ms,
            "sanitize": defaults.sanitize,
            "auth": AuthConfig.from_env(),
        }
        values.update(overrides)
        return cls(**values)


__all__ = ["AuthConfig", "RunnerConfig"]
