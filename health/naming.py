# ============================================================================
# SITE NAMING
# ============================================================================
# STATUS: Infrastructure - Report id / display name derivation
# PURPOSE: Name the report after the site it describes
# CREATED: 18 OCT 2026
# ============================================================================
"""
Site Naming

Resolution order for the site name:
1. ?site= query parameter
2. X-Site-Name header
3. SITE environment variable
4. First label of DOMAIN ("https://example.com" -> "example")
5. "site"
"""

import os
import re
from typing import Any

from health.request import get_header, get_query_param

DEFAULT_SITE_NAME = "site"

_DOMAIN_LABEL = re.compile(r"^(?:https?://)?([^./:]+)\.")


def get_site_name(request: Any = None) -> str:
    """Lower-cased site name for the report."""
    for candidate in (
        get_query_param(request, "site"),
        get_header(request, "X-Site-Name"),
        os.getenv("SITE"),
    ):
        if candidate and candidate.strip():
            return candidate.strip().lower()

    domain = os.getenv("DOMAIN", "").strip()
    match = _DOMAIN_LABEL.match(domain)
    if match:
        return match.group(1).lower()

    return DEFAULT_SITE_NAME


def get_site_healthcheck_id(request: Any = None) -> str:
    return f"{get_site_name(request)}_healthcheck"


def get_site_display_name(request: Any = None) -> str:
    site = get_site_name(request)
    return f"{site[:1].upper()}{site[1:]} Site Health"


__all__ = [
    "get_site_name",
    "get_site_healthcheck_id",
    "get_site_display_name",
]
