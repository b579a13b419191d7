# ============================================================================
# REPORT SANITIZER
# ============================================================================
# STATUS: Infrastructure - Redaction before the report leaves the process
# PURPOSE: Strip variable names, raw error text, URLs and fine timing
# CREATED: 18 OCT 2026
# ============================================================================
"""
Report Sanitizer

Strategies (core.contracts.SanitizeStrategy):

    none           Report returned untouched.

    counts-only    Most restrictive, for production:
                   - env var node    -> present/missing COUNTS only
                   - build node      -> completed count + status only
                   - Down/Unknown    -> generic category message
                   - totalCheckTime  -> rounded to nearest 100ms

    redact-values  For internal monitoring:
                   - env var node    -> names masked with '*', same length
                   - metadata "url"  -> query string stripped, or replaced
                                        with a marker if it does not parse

Both redacting strategies walk the whole tree, including nested
`services`, and operate on a deep copy; the caller's report is never
mutated. Nodes are located by the stable ids the build check assigns
(env_vars, build_artifacts), not by display name.
"""

import re
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlsplit, urlunsplit

from core.contracts import (
    BUILD_ARTIFACTS_NODE_ID,
    ENV_VARS_NODE_ID,
    HealthStatus,
    SanitizeStrategy,
)
from core.models import HealthCheckResponse, StatusNode

MASK_CHAR = "*"
URL_REDACTED = "[URL_REDACTED]"
TIMING_GRANULARITY_MS = 100

ENV_GROUPS = ("critical", "optional")

# Ordered: first matching pattern decides the generic message
_ERROR_CATEGORIES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"search|algolia", re.IGNORECASE), "Search service unavailable"),
    (re.compile(r"(?i:graphql)|API"), "API service unavailable"),
    (re.compile(r"timeout|timed out", re.IGNORECASE), "Service timeout"),
    (re.compile(r"connection", re.IGNORECASE), "Connection failed"),
]


def sanitize_response(
    response: HealthCheckResponse,
    strategy: Union[SanitizeStrategy, str, None] = SanitizeStrategy.NONE,
) -> HealthCheckResponse:
    """Apply a sanitization strategy, returning a new report."""
    strategy = SanitizeStrategy(strategy or SanitizeStrategy.NONE)
    if strategy is SanitizeStrategy.NONE:
        return response

    sanitized = response.model_copy(deep=True)
    if strategy is SanitizeStrategy.COUNTS_ONLY:
        _sanitize_counts_only(sanitized)
    elif strategy is SanitizeStrategy.REDACT_VALUES:
        _sanitize_redact_values(sanitized)
    return sanitized


# ============================================================================
# COUNTS-ONLY
# ============================================================================

def _sanitize_counts_only(response: HealthCheckResponse) -> None:
    env_node = find_node(response.services, ENV_VARS_NODE_ID)
    if env_node is not None and env_node.metadata:
        groups = _env_groups(env_node.metadata)
        metadata: Dict[str, Any] = {}
        for group in ENV_GROUPS:
            present, missing, total = groups[group]
            metadata[f"{group}PresentCount"] = _count(present)
            metadata[f"{group}MissingCount"] = _count(missing)
            metadata[f"{group}Total"] = total
        metadata["note"] = "Details hidden for security (counts only)"
        env_node.metadata = metadata
        env_node.message = "Environment variables check completed"

    build_node = find_node(response.services, BUILD_ARTIFACTS_NODE_ID)
    if build_node is not None and build_node.metadata:
        build_node.metadata = {
            "checksCompleted": _count(build_node.metadata.get("checks")),
            "status": build_node.status.value,
        }
        build_node.message = "Build artifacts verified"

    _generalize_error_messages(response.services)

    total = response.performance.total_check_time
    response.performance.total_check_time = (
        (total + TIMING_GRANULARITY_MS // 2) // TIMING_GRANULARITY_MS * TIMING_GRANULARITY_MS
    )


def classify_error_message(message: str, name: str) -> str:
    """Map a raw failure message onto a generic category message."""
    for pattern, generic in _ERROR_CATEGORIES:
        if pattern.search(message or ""):
            return generic
    return f"{name} check failed"


def _generalize_error_messages(nodes: List[StatusNode]) -> None:
    for node in nodes:
        if node.status in (HealthStatus.DOWN, HealthStatus.UNKNOWN):
            node.message = classify_error_message(node.message, node.name)
        if node.services:
            _generalize_error_messages(node.services)


# ============================================================================
# REDACT-VALUES
# ============================================================================

def _sanitize_redact_values(response: HealthCheckResponse) -> None:
    env_node = find_node(response.services, ENV_VARS_NODE_ID)
    if env_node is not None and env_node.metadata:
        groups = _env_groups(env_node.metadata)
        metadata: Dict[str, Any] = {}
        for group in ENV_GROUPS:
            present, missing, _ = groups[group]
            masked_present = [mask_value(v) for v in _as_list(present)]
            masked_missing = [mask_value(v) for v in _as_list(missing)]
            metadata[group] = {
                "present": masked_present,
                "missing": masked_missing,
                "total": len(masked_present) + len(masked_missing),
            }
        metadata["note"] = "Variable names masked for security"
        env_node.metadata = metadata

    for node in response.services:
        _redact_urls(node)


def mask_value(value: Any) -> str:
    """Replace every character with MASK_CHAR, preserving length."""
    return MASK_CHAR * len(str(value))


def strip_url_query(value: Any) -> str:
    """Drop query string and fragment; unparseable values become URL_REDACTED."""
    if not isinstance(value, str):
        return URL_REDACTED
    try:
        parts = urlsplit(value.strip())
    except ValueError:
        return URL_REDACTED
    if not parts.scheme or not parts.netloc:
        return URL_REDACTED
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def _redact_urls(node: StatusNode) -> None:
    if node.metadata:
        _redact_url_fields(node.metadata)
    for child in node.services or []:
        _redact_urls(child)


def _redact_url_fields(value: Any) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            if key == "url":
                value[key] = strip_url_query(item)
            else:
                _redact_url_fields(item)
    elif isinstance(value, list):
        for item in value:
            _redact_url_fields(item)


# ============================================================================
# HELPERS
# ============================================================================

def find_node(nodes: List[StatusNode], node_id: str) -> Optional[StatusNode]:
    """Depth-first search for a node id anywhere in the tree."""
    for node in nodes:
        if node.id == node_id:
            return node
        if node.services:
            found = find_node(node.services, node_id)
            if found is not None:
                return found
    return None


def _env_groups(metadata: Dict[str, Any]) -> Dict[str, Tuple[Any, Any, int]]:
    """
    Normalise env var metadata to {group: (present, missing, total)}.

    Accepts grouped metadata ({"critical": {"present": [...], ...}}) or a
    flat {"present": [...], "missing": [...]}, which counts as critical.
    """
    flat = "present" in metadata or "missing" in metadata
    groups = {}
    for group in ENV_GROUPS:
        if flat:
            section = metadata if group == "critical" else {}
        else:
            section = metadata.get(group) or {}
        present = section.get("present")
        missing = section.get("missing")
        total = section.get("total")
        if not isinstance(total, int):
            total = _count(present) + _count(missing)
        groups[group] = (present, missing, total)
    return groups


def _count(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, (list, tuple, set)):
        return len(value)
    return 0


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return []


__all__ = [
    "MASK_CHAR",
    "URL_REDACTED",
    "sanitize_response",
    "classify_error_message",
    "mask_value",
    "strip_url_query",
    "find_node",
]
