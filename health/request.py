# ============================================================================
# REQUEST ACCESSORS
# ============================================================================
# STATUS: Infrastructure - Framework-neutral request inspection
# PURPOSE: Read headers / query params from whatever request-like value
#          the adapter hands to the engine
# CREATED: 18 OCT 2026
# ============================================================================
"""
Request Accessors

The engine never depends on a web framework. It only reads headers and
query parameters, from any of:

- Starlette / FastAPI Request   (.headers, .query_params)
- Mapping                       {"headers": {...}, "query": {...}}
- Any object with .headers / .query attributes
- None                          (no request: nothing is present)

Header names are matched case-insensitively. Multi-valued entries
yield their first value.
"""

from collections.abc import Mapping
from typing import Any, Optional


def _section(request: Any, *names: str) -> Any:
    if request is None:
        return None
    for name in names:
        # Attributes first: a Starlette Request is also a Mapping over its ASGI scope
        if hasattr(request, name):
            return getattr(request, name)
        if isinstance(request, Mapping) and name in request:
            return request[name]
    return None


def _first(value: Any) -> Optional[str]:
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    return str(value)


def _lookup(section: Any, key: str, case_insensitive: bool) -> Optional[str]:
    if section is None:
        return None
    # Starlette Headers / QueryParams and plain dicts all support .get
    value = section.get(key) if hasattr(section, "get") else None
    if value is None and case_insensitive and hasattr(section, "items"):
        wanted = key.lower()
        for name, candidate in section.items():
            if str(name).lower() == wanted:
                value = candidate
                break
    return _first(value)


def get_header(request: Any, name: str) -> Optional[str]:
    """Header value (case-insensitive name), or None."""
    return _lookup(_section(request, "headers"), name, case_insensitive=True)


def get_query_param(request: Any, name: str) -> Optional[str]:
    """Query parameter value, or None."""
    return _lookup(_section(request, "query_params", "query"), name, case_insensitive=False)


__all__ = ["get_header", "get_query_param"]
