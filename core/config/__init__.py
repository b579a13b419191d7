# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the health check engine.
"""

from core.config.defaults import (
    RunnerDefaults,
    AuthDefaults,
    get_environment,
    is_production,
)

__all__ = [
    "RunnerDefaults",
    "AuthDefaults",
    "get_environment",
    "is_production",
]
