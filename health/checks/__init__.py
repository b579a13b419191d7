# ============================================================================
# HEALTH CHECKS
# ============================================================================
# STATUS: Infrastructure - Check implementations
# PURPOSE: Concrete checks shipped with the engine
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Checks

- build:  runtime, project metadata, env vars, build artifacts
- http:   generic endpoint list
- pages:  critical / important page reachability
- search: search index existence, record counts and categories

Checks are plain objects; add them to a RunnerConfig or register them
with health.registry.register_check.
"""

from health.checks.build import BuildCheck
from health.checks.http import EndpointConfig, HttpCheck, PagesCheck
from health.checks.search import SearchIndexCheck

__all__ = [
    "BuildCheck",
    "EndpointConfig",
    "HttpCheck",
    "PagesCheck",
    "SearchIndexCheck",
]
