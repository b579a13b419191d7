# ============================================================================
# HTTP ENDPOINT HEALTH CHECKS
# ============================================================================
# STATUS: Infrastructure - Endpoint and page reachability
# PURPOSE: Check HTTP endpoints with per-request timeout and retries
# CREATED: 18 OCT 2026
# ============================================================================
"""
HTTP Endpoint Health Checks

- HttpCheck:   flat list of endpoints under one "http" group node
- PagesCheck:  "critical" pages (failure -> Down) and "important" pages
               (failure -> Partial) as two sub-groups of "pages"

Retries and backoff live here, inside the check; the runner never retries.
Endpoint metadata carries the full `url`, which the redact-values
sanitizer strips of its query string.

Relative paths are resolved against get_base_url():
SITE_URL -> DOMAIN -> http://localhost:8000 in development.
"""

import asyncio
import os
import re
import time
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import BaseModel, Field

from __version__ import __version__
from core.config.defaults import get_environment
from core.contracts import HealthStatus
from core.logging import ComponentType, get_logger
from core.models import StatusNode
from health.aggregator import create_group_node, create_status_node
from health.core import HealthCheck

logger = get_logger(__name__, ComponentType.CHECK)

USER_AGENT = f"Healthgate-HealthCheck/{__version__}"


class EndpointConfig(BaseModel):
    """One endpoint to check."""
    path: str = Field(description="Absolute URL or path relative to the base URL")
    name: str
    method: str = Field(default="GET", pattern="^(GET|POST|HEAD)$")
    expected_status: int = Field(default=200, ge=100, le=599)
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[Any] = None


def get_base_url() -> str:
    """
    Resolve the base URL for relative endpoint paths.

    Raises:
        RuntimeError: nothing configured outside development
    """
    for name in ("SITE_URL", "DOMAIN"):
        value = os.getenv(name, "").strip()
        if value:
            return value if value.startswith("http") else f"https://{value}"

    if get_environment() == "development":
        return "http://localhost:8000"

    raise RuntimeError("No base URL configured. Set SITE_URL or DOMAIN environment variable")


def resolve_url(base_url: str, path: str) -> str:
    if path.startswith(("http://", "https://")):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def endpoint_node_id(prefix: str, path: str) -> str:
    return f"{prefix}_{re.sub(r'[^a-zA-Z0-9]', '_', path)}"


class EndpointChecker:
    """
    Checks single endpoints with retries and exponential backoff.

    Args:
        base_url: Base for relative paths
        timeout_ms: Per-request timeout
        retries: Extra attempts after the first failure
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str = "",
        timeout_ms: int = 5000,
        retries: int = 2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        backoff_seconds: float = 0.1,
    ):
        self.base_url = base_url
        self.timeout_ms = timeout_ms
        self.retries = retries
        self.transport = transport
        self.backoff_seconds = backoff_seconds

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout_ms / 1000,
            transport=self.transport,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=False,
        )

    async def check(
        self,
        client: httpx.AsyncClient,
        endpoint: EndpointConfig,
        id_prefix: str = "http",
        failure_status: HealthStatus = HealthStatus.DOWN,
    ) -> StatusNode:
        """Check one endpoint; never raises for transport errors."""
        url = resolve_url(self.base_url, endpoint.path)
        node_id = endpoint_node_id(id_prefix, endpoint.path)
        start_time = time.monotonic()

        attempt = 0
        while True:
            try:
                response = await client.request(
                    endpoint.method,
                    url,
                    headers=endpoint.headers or None,
                    json=endpoint.body,
                )
                break
            except httpx.HTTPError as e:
                if attempt >= self.retries:
                    duration = _elapsed_ms(start_time)
                    return create_status_node(
                        node_id,
                        endpoint.name,
                        failure_status,
                        f"{self._describe_error(e)} ({duration}ms)",
                        metadata={
                            "error": str(e) or type(e).__name__,
                            "url": url,
                            "attempts": attempt + 1,
                        },
                    )
                await asyncio.sleep(self.backoff_seconds * (2 ** attempt))
                attempt += 1

        duration = _elapsed_ms(start_time)
        if response.status_code == endpoint.expected_status:
            return create_status_node(
                node_id,
                endpoint.name,
                HealthStatus.UP,
                f"{response.status_code} OK ({duration}ms)",
                metadata={
                    "statusCode": response.status_code,
                    "responseTime": duration,
                    "url": url,
                    "attempt": attempt + 1,
                },
            )
        return create_status_node(
            node_id,
            endpoint.name,
            failure_status,
            f"HTTP {response.status_code} (expected {endpoint.expected_status}) ({duration}ms)",
            metadata={
                "statusCode": response.status_code,
                "expectedStatus": endpoint.expected_status,
                "responseTime": duration,
                "url": url,
                "attempt": attempt + 1,
            },
        )

    def _describe_error(self, error: httpx.HTTPError) -> str:
        if isinstance(error, httpx.TimeoutException):
            return f"Timeout after {self.timeout_ms}ms"
        if isinstance(error, httpx.ConnectError):
            return "Connection failed"
        return str(error) or "Request failed"


def _elapsed_ms(start_time: float) -> int:
    return int((time.monotonic() - start_time) * 1000)


class HttpCheck(HealthCheck):
    """Generic HTTP endpoint check."""

    id = "http"
    name = "HTTP Endpoints"

    def __init__(
        self,
        endpoints: Sequence[Any],
        timeout_ms: int = 5000,
        retries: int = 2,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoints = [EndpointConfig.model_validate(e) for e in endpoints]
        self.timeout_ms = timeout_ms
        self.retries = retries
        self.base_url = base_url
        self.transport = transport

    async def run(self) -> StatusNode:
        if not self.endpoints:
            return self.node(HealthStatus.UP, "No endpoints configured for checking")
        try:
            checker = EndpointChecker(
                self.base_url if self.base_url is not None else get_base_url(),
                self.timeout_ms,
                self.retries,
                self.transport,
            )
            async with checker.client() as client:
                checks = await asyncio.gather(
                    *(checker.check(client, endpoint, "http") for endpoint in self.endpoints)
                )
        except Exception as e:
            logger.warning(f"HTTP checks unavailable: {e}")
            return self.node(
                HealthStatus.PARTIAL,
                f"HTTP checks unavailable: {e}",
                note="HTTP checks failed but not critical",
            )

        return create_group_node(
            self.id,
            self.name,
            checks,
            metadata={"totalEndpoints": len(self.endpoints)},
        )


class PagesCheck(HealthCheck):
    """
    Page reachability check.

    Critical pages report Down on failure; important pages report
    Partial, so they can degrade but never take the site Down.
    """

    id = "pages"
    name = "Page Health"

    def __init__(
        self,
        critical: Optional[Sequence[Any]] = None,
        important: Optional[Sequence[Any]] = None,
        timeout_ms: int = 5000,
        retries: int = 2,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.critical = [EndpointConfig.model_validate(p) for p in critical or []]
        self.important = [EndpointConfig.model_validate(p) for p in important or []]
        self.timeout_ms = timeout_ms
        self.retries = retries
        self.base_url = base_url
        self.transport = transport

    async def run(self) -> StatusNode:
        if not self.critical and not self.important:
            return self.node(HealthStatus.UP, "No pages configured for checking")
        try:
            checker = EndpointChecker(
                self.base_url if self.base_url is not None else get_base_url(),
                self.timeout_ms,
                self.retries,
                self.transport,
            )
            groups: List[StatusNode] = []
            async with checker.client() as client:
                for group_id, group_name, pages, failure_status in (
                    ("critical_pages", "Critical Pages", self.critical, HealthStatus.DOWN),
                    ("important_pages", "Important Pages", self.important, HealthStatus.PARTIAL),
                ):
                    if not pages:
                        continue
                    checks = await asyncio.gather(
                        *(checker.check(client, page, "page", failure_status) for page in pages)
                    )
                    groups.append(create_group_node(
                        group_id,
                        group_name,
                        checks,
                        metadata={"totalPages": len(pages)},
                    ))
        except Exception as e:
            logger.warning(f"Page checks unavailable: {e}")
            return self.node(
                HealthStatus.PARTIAL,
                f"Page checks unavailable: {e}",
                note="Page checks failed but not critical",
            )

        return create_group_node(self.id, self.name, groups)


__all__ = [
    "EndpointConfig",
    "EndpointChecker",
    "HttpCheck",
    "PagesCheck",
    "get_base_url",
    "resolve_url",
]
