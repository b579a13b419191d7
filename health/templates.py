# ============================================================================
# RUNNER CONFIG TEMPLATES
# ============================================================================
# STATUS: Infrastructure - Ready-made check compositions
# PURPOSE: Sensible RunnerConfig presets for common deployments
# CREATED: 18 OCT 2026
# ============================================================================
"""
Runner Config Templates

- default_template():  pages + build checks, 60s result cache,
                       counts-only sanitization in production
- minimal_template():  build check only, 3s budget, no cache

Both accept keyword overrides for any RunnerConfig field.
"""

from core.config.defaults import is_production
from core.contracts import DEFAULT_PRECEDENCE, SanitizeStrategy
from core.models import AuthConfig, RunnerConfig
from health.checks import BuildCheck, PagesCheck


def default_template(**overrides) -> RunnerConfig:
    values = {
        "checks": [
            PagesCheck(
                critical=[
                    {"path": "/", "name": "Homepage"},
                    {"path": "/robots.txt", "name": "Robots.txt"},
                    {"path": "/sitemap.xml", "name": "Sitemap"},
                    {"path": "/favicon.ico", "name": "Favicon"},
                ],
                timeout_ms=5000,
                retries=2,
            ),
            BuildCheck(
                critical_env=["ENVIRONMENT"],
                optional_env=["SITE_URL", "DOMAIN", "SITE"],
                check_project_file=True,
            ),
        ],
        "budget_ms": 5000,
        "cache_ms": 60000,
        "aggregation_precedence": list(DEFAULT_PRECEDENCE),
        "auth": AuthConfig.from_env(),
        "sanitize": SanitizeStrategy.COUNTS_ONLY if is_production() else SanitizeStrategy.NONE,
    }
    values.update(overrides)
    return RunnerConfig(**values)


def minimal_template(**overrides) -> RunnerConfig:
    values = {
        "checks": [
            BuildCheck(optional_env=["ENVIRONMENT"], check_project_file=True),
        ],
        "budget_ms": 3000,
        "cache_ms": 0,
        "aggregation_precedence": list(DEFAULT_PRECEDENCE),
        "auth": AuthConfig.from_env(),
        "sanitize": SanitizeStrategy.NONE,
    }
    values.update(overrides)
    return RunnerConfig(**values)


TEMPLATES = {
    "default": default_template,
    "minimal": minimal_template,
}


__all__ = ["default_template", "minimal_template", "TEMPLATES"]
